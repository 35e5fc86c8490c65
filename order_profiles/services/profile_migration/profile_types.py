"""
ProfileTypeInstaller - prepares the billing and shipping profile types.

Before an order type can use separate profile types, both types must exist
and carry the custom fields merchants added to the shared customer type.
"""

import logging
from typing import Optional

from order_profiles.core.config import Settings, get_settings
from order_profiles.domain.models import FieldDefinition, ProfileType, ProfileTypeDefinition

from .interfaces import IProfileTypeRepository

logger = logging.getLogger(__name__)


class ProfileTypeInstaller:
    """Creates missing profile types and copies custom field definitions."""

    def __init__(self, profile_type_repository: IProfileTypeRepository, settings: Optional[Settings] = None):
        self.profile_type_repository = profile_type_repository
        self.settings = settings or get_settings()

    def _label(self, profile_type: ProfileType) -> str:
        if profile_type == ProfileType.BILLING:
            return self.settings.BILLING_PROFILE_TYPE_LABEL
        return self.settings.SHIPPING_PROFILE_TYPE_LABEL

    async def ensure_profile_types(self) -> list[str]:
        """
        Create the billing and shipping profile types when missing.

        Returns:
            list[str]: IDs of the profile types created by this call
        """
        created = []
        for profile_type in ProfileType.split_types():
            if await self.profile_type_repository.load(profile_type.value) is not None:
                logger.debug(f"Profile type '{profile_type.value}' already exists")
                continue

            address_field = FieldDefinition(
                profile_type=profile_type.value,
                field_name="address",
                field_type="address",
                label="Address",
                is_base_field=True,
            )
            await self.profile_type_repository.create(
                ProfileTypeDefinition(id=profile_type.value, label=self._label(profile_type)),
                fields=[address_field],
            )
            created.append(profile_type.value)

        if created:
            logger.info(f"Created profile types: {', '.join(created)}")
        return created

    async def copy_custom_fields(self) -> int:
        """
        Copy non-base field definitions of the shared customer type to both split types.

        Fields already present on a target type are left untouched.

        Returns:
            int: Number of field definitions copied
        """
        source_fields = await self.profile_type_repository.get_field_definitions(ProfileType.COMMON.value)
        copied = 0

        for profile_type in ProfileType.split_types():
            existing = await self.profile_type_repository.get_field_definitions(profile_type.value)
            for field_name, definition in source_fields.items():
                if definition.is_base_field or field_name in existing:
                    continue
                await self.profile_type_repository.add_field_definition(definition.copy_to(profile_type.value))
                copied += 1
                logger.debug(f"Copied field '{field_name}' to profile type '{profile_type.value}'")

        logger.info(f"Copied {copied} custom field definitions to the billing and shipping profile types")
        return copied
