"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .migration import MigrationStatus, ReclassifyResult
from .order import Order, Shipment
from .order_type import OrderType
from .profile import Profile, ProfileType
from .profile_type import FieldDefinition, ProfileTypeDefinition

__all__ = [
    "FieldDefinition",
    "MigrationStatus",
    "Order",
    "OrderType",
    "Profile",
    "ProfileType",
    "ProfileTypeDefinition",
    "ReclassifyResult",
    "Shipment",
]
