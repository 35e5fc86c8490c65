"""
Customer profile domain model.

A profile is an address record attached to orders in a billing or
shipping role. The same profile ID may back both roles of one order.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from order_profiles.domain.value_objects.address import Address


class ProfileType(str, Enum):
    """Closed set of profile type machine names."""

    COMMON = "customer"
    BILLING = "customer_billing"
    SHIPPING = "customer_shipping"

    @classmethod
    def split_types(cls) -> tuple["ProfileType", "ProfileType"]:
        """Types introduced when an order type uses separate profiles."""
        return (cls.BILLING, cls.SHIPPING)


@dataclass
class Profile:
    """
    Domain model representing a customer profile.

    Attributes:
        type: Profile type tag (mutable, relabelled by the migration)
        address: Postal address
        uid: Owner user ID (None for anonymous checkouts)
        id: Profile ID (None until persisted)
    """

    type: ProfileType
    address: Address
    uid: int | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, ProfileType):
            self.type = ProfileType(self.type)

    @property
    def is_new(self) -> bool:
        """Whether the profile has not been persisted yet."""
        return self.id is None

    def relabel(self, profile_type: ProfileType) -> None:
        """Change the profile type tag in place, keeping the ID."""
        self.type = ProfileType(profile_type)

    def duplicate(self) -> "Profile":
        """Return an unsaved copy with the same fields and no ID."""
        return replace(self, id=None)

    def to_dict(self) -> dict[str, Any]:
        """Convert profile to dictionary for persistence."""
        return {
            "id": self.id,
            "type": self.type.value,
            "uid": self.uid,
            **self.address.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create profile from a flat row dictionary."""
        return cls(
            id=data.get("id"),
            type=ProfileType(data["type"]),
            uid=data.get("uid"),
            address=Address.from_dict(data),
        )
