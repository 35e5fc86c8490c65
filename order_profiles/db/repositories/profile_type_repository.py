"""
ProfileTypeRepository: profile type and field definition configuration.

This is the configuration store the profile type installer writes to when
an order type switches to separate billing/shipping profile types.
"""

import json
import logging
from typing import Optional

from sqlalchemy import text

from order_profiles.db.repositories.base import BaseRepository, log_operation, with_retry
from order_profiles.domain.models import FieldDefinition, ProfileTypeDefinition

logger = logging.getLogger(__name__)


class ProfileTypeRepository(BaseRepository):
    """Repository for profile types and their field definitions."""

    TABLES = ("profile_types", "profile_fields")
    ENTITY = "profile_type"

    @with_retry()
    @log_operation()
    async def load(self, profile_type_id: str) -> Optional[ProfileTypeDefinition]:
        """Load a profile type, or None when it does not exist."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text("SELECT id, label FROM profile_types WHERE id = :id"), {"id": profile_type_id}
                )
                row = result.mappings().first()
        except Exception as e:
            raise self._persistence_error(e, "load", profile_type_id) from e

        return ProfileTypeDefinition(id=row["id"], label=row["label"]) if row else None

    @log_operation()
    async def create(
        self, profile_type: ProfileTypeDefinition, fields: list[FieldDefinition] | None = None
    ) -> ProfileTypeDefinition:
        """Create a profile type together with its initial field definitions."""
        try:
            async with self.get_session() as session:
                await session.execute(
                    text("INSERT INTO profile_types (id, label) VALUES (:id, :label)"),
                    {"id": profile_type.id, "label": profile_type.label},
                )
                for field_definition in fields or []:
                    await session.execute(text(_INSERT_FIELD), _field_params(field_definition))
                await session.commit()
        except Exception as e:
            raise self._persistence_error(e, "create", profile_type.id) from e

        logger.info(f"Created profile type '{profile_type.id}'")
        return profile_type

    @with_retry()
    @log_operation()
    async def get_field_definitions(self, profile_type_id: str) -> dict[str, FieldDefinition]:
        """Field definitions of a profile type keyed by field name."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text(
                        "SELECT profile_type, field_name, field_type, label, is_base_field, settings "
                        "FROM profile_fields WHERE profile_type = :profile_type ORDER BY id"
                    ),
                    {"profile_type": profile_type_id},
                )
                rows = result.mappings().all()
        except Exception as e:
            raise self._persistence_error(e, "get_field_definitions", profile_type_id) from e

        return {
            row["field_name"]: FieldDefinition(
                profile_type=row["profile_type"],
                field_name=row["field_name"],
                field_type=row["field_type"],
                label=row["label"],
                is_base_field=bool(row["is_base_field"]),
                settings=json.loads(row["settings"] or "{}"),
            )
            for row in rows
        }

    @log_operation()
    async def add_field_definition(self, field_definition: FieldDefinition) -> FieldDefinition:
        """Attach a field definition to its profile type."""
        try:
            async with self.get_session() as session:
                await session.execute(text(_INSERT_FIELD), _field_params(field_definition))
                await session.commit()
        except Exception as e:
            raise self._persistence_error(e, "add_field_definition", field_definition.field_name) from e

        return field_definition


_INSERT_FIELD = (
    "INSERT INTO profile_fields (profile_type, field_name, field_type, label, is_base_field, settings) "
    "VALUES (:profile_type, :field_name, :field_type, :label, :is_base_field, :settings)"
)


def _field_params(field_definition: FieldDefinition) -> dict:
    return {
        "profile_type": field_definition.profile_type,
        "field_name": field_definition.field_name,
        "field_type": field_definition.field_type,
        "label": field_definition.label,
        "is_base_field": field_definition.is_base_field,
        "settings": json.dumps(field_definition.settings),
    }
