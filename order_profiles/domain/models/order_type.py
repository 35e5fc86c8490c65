"""
Order type domain model.

An order type either uses one shared profile type for billing and shipping,
or separate profile types. The switch to separate types is one-way.
"""

from dataclasses import dataclass
from typing import Any

from .profile import ProfileType


@dataclass
class OrderType:
    """
    Configuration entity controlling profile policy for a class of orders.

    Attributes:
        id: Machine name (e.g. "default")
        label: Human readable label
        use_multiple_profile_types: Whether billing and shipping use separate types
    """

    id: str
    label: str
    use_multiple_profile_types: bool = False

    @property
    def billing_profile_type_id(self) -> ProfileType:
        """Profile type used for billing profiles of this order type."""
        return ProfileType.BILLING if self.use_multiple_profile_types else ProfileType.COMMON

    @property
    def shipping_profile_type_id(self) -> ProfileType:
        """Profile type used for shipping profiles of this order type."""
        return ProfileType.SHIPPING if self.use_multiple_profile_types else ProfileType.COMMON

    def enable_multiple_profile_types(self) -> None:
        """Switch to separate billing/shipping profile types (irreversible)."""
        self.use_multiple_profile_types = True

    def to_dict(self) -> dict[str, Any]:
        """Convert order type to dictionary for persistence."""
        return {
            "id": self.id,
            "label": self.label,
            "use_multiple_profile_types": self.use_multiple_profile_types,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderType":
        """Create order type from dictionary."""
        return cls(
            id=data["id"],
            label=data.get("label") or data["id"],
            use_multiple_profile_types=bool(data.get("use_multiple_profile_types", False)),
        )
