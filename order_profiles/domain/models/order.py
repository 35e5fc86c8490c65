"""
Order domain model (Aggregate Root).

Only the parts of an order that the profile migration touches are modelled:
its billing profile and its shipments.
"""

from dataclasses import dataclass, field

from .profile import Profile


@dataclass
class Shipment:
    """
    A shipment of an order, referencing exactly one shipping profile.

    Attributes:
        order_id: Owning order ID
        shipping_profile: Referenced shipping profile (None when unset)
        id: Shipment ID (None until persisted)
    """

    order_id: int
    shipping_profile: Profile | None = None
    id: int | None = None

    @property
    def shipping_profile_id(self) -> int | None:
        """ID of the referenced shipping profile."""
        return self.shipping_profile.id if self.shipping_profile else None

    def set_shipping_profile(self, profile: Profile) -> None:
        """Rebind the shipment to another shipping profile."""
        self.shipping_profile = profile


@dataclass
class Order:
    """
    Domain model representing an order (Aggregate Root).

    Attributes:
        id: Order ID
        order_type_id: Machine name of the order type
        billing_profile: Billing profile (None when the order has none)
        shipments: Shipments owned by the order
    """

    id: int
    order_type_id: str
    billing_profile: Profile | None = None
    shipments: list[Shipment] = field(default_factory=list)

    @property
    def billing_profile_id(self) -> int | None:
        """ID of the billing profile."""
        return self.billing_profile.id if self.billing_profile else None

    @property
    def has_billing_profile(self) -> bool:
        """Whether the order references a billing profile."""
        return self.billing_profile is not None
