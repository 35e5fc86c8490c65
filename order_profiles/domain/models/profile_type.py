"""
Profile type and field definition models.

These mirror the configuration the host storage keeps per profile type:
the type itself and the field definitions attached to it.
"""

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass
class ProfileTypeDefinition:
    """A profile type configuration record."""

    id: str
    label: str


@dataclass
class FieldDefinition:
    """
    A field attached to a profile type.

    Attributes:
        profile_type: Profile type the field belongs to
        field_name: Machine name of the field
        field_type: Storage type (e.g. "address", "string", "telephone")
        label: Human readable label
        is_base_field: Base fields are provided by every type and never copied
        settings: Field specific settings
    """

    profile_type: str
    field_name: str
    field_type: str
    label: str = ""
    is_base_field: bool = False
    settings: dict[str, Any] = field(default_factory=dict)

    def copy_to(self, profile_type: str) -> "FieldDefinition":
        """Return the same definition attached to another profile type."""
        return replace(self, profile_type=profile_type, settings=dict(self.settings))
