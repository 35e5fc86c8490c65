"""
Address value object for postal addresses stored on customer profiles.
"""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class Address:
    """
    Immutable postal address.

    Two profiles with equal addresses compare equal here even when they
    are different records; identity lives on the profile, not the address.

    Example:
        >>> Address(country_code="us", locality="Portland").country_code
        'US'
    """

    country_code: str
    administrative_area: str = ""
    locality: str = ""
    postal_code: str = ""
    address_line1: str = ""
    address_line2: str = ""
    given_name: str = ""
    family_name: str = ""
    organization: str = ""

    def __post_init__(self) -> None:
        """Validate address after initialization."""
        if not self.country_code or len(self.country_code) != 2:
            raise ValueError(f"Invalid country code: {self.country_code!r}")

        object.__setattr__(self, "country_code", self.country_code.upper())

    @property
    def full_name(self) -> str:
        """Recipient name as printed on a label."""
        return f"{self.given_name} {self.family_name}".strip()

    def to_dict(self) -> dict[str, Any]:
        """Convert address to dictionary for persistence."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Address":
        """Create address from dictionary, ignoring unknown keys."""
        known = {name: data[name] for name in cls.__dataclass_fields__ if data.get(name) is not None}
        return cls(**known)
