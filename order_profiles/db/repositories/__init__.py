"""
Storage repositories used by the profile migration.

Repository Structure:
- BaseRepository: Connection management, error wrapping, table checks
- OrderRepository: Order aggregate loading and lookup by order type
- ProfileRepository: Profile upsert and duplication
- ShipmentRepository: Shipment upsert
- OrderTypeRepository: Order type configuration
- ProfileTypeRepository: Profile types and field definitions
"""

from .base import BaseRepository
from .order_repository import OrderRepository
from .order_type_repository import OrderTypeRepository
from .profile_repository import ProfileRepository
from .profile_type_repository import ProfileTypeRepository
from .shipment_repository import ShipmentRepository

__all__ = [
    "BaseRepository",
    "OrderRepository",
    "OrderTypeRepository",
    "ProfileRepository",
    "ProfileTypeRepository",
    "ShipmentRepository",
]
