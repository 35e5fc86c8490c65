"""
SQLAlchemy ORM models describing the storage schema.

Tables:
- order_types: Order type configuration and the profile-type switch flag
- profile_types: Profile type configuration records
- profile_fields: Field definitions attached to profile types
- profiles: Customer profiles (address records)
- orders: Orders referencing one billing profile
- shipments: Shipments referencing one shipping profile

Repositories query these tables with plain SQL; the ORM classes are the
single place the schema is declared and are used by ``ConnDB.create_schema``.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class OrderTypeRecord(Base):
    """Order type configuration."""

    __tablename__ = "order_types"

    id = Column(String(64), primary_key=True)
    label = Column(String(255), nullable=False)
    use_multiple_profile_types = Column(Boolean, nullable=False, default=False)


class ProfileTypeRecord(Base):
    """Profile type configuration."""

    __tablename__ = "profile_types"

    id = Column(String(64), primary_key=True)
    label = Column(String(255), nullable=False)


class ProfileFieldRecord(Base):
    """Field definition attached to a profile type."""

    __tablename__ = "profile_fields"
    __table_args__ = (UniqueConstraint("profile_type", "field_name", name="uq_profile_fields_type_name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    profile_type = Column(String(64), ForeignKey("profile_types.id"), nullable=False, index=True)
    field_name = Column(String(64), nullable=False)
    field_type = Column(String(64), nullable=False)
    label = Column(String(255), nullable=False, default="")
    is_base_field = Column(Boolean, nullable=False, default=False)
    settings = Column(Text, nullable=False, default="{}")


class ProfileRecord(Base):
    """Customer profile with its address columns."""

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(64), nullable=False, index=True)
    uid = Column(Integer, nullable=True)
    country_code = Column(String(2), nullable=False)
    administrative_area = Column(String(255), nullable=False, default="")
    locality = Column(String(255), nullable=False, default="")
    postal_code = Column(String(32), nullable=False, default="")
    address_line1 = Column(String(255), nullable=False, default="")
    address_line2 = Column(String(255), nullable=False, default="")
    given_name = Column(String(255), nullable=False, default="")
    family_name = Column(String(255), nullable=False, default="")
    organization = Column(String(255), nullable=False, default="")


class OrderRecord(Base):
    """Order header; only the columns the profile migration needs."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_type = Column(String(64), ForeignKey("order_types.id"), nullable=False, index=True)
    billing_profile_id = Column(Integer, ForeignKey("profiles.id"), nullable=True)


class ShipmentRecord(Base):
    """Shipment of an order."""

    __tablename__ = "shipments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    shipping_profile_id = Column(Integer, ForeignKey("profiles.id"), nullable=True)
