"""
ProfileRepository: customer profile persistence.

Profiles are upserted by ID; saving a profile without an ID inserts a new
row and assigns the generated ID back to the domain object.
"""

import logging
from typing import Any, Iterable, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from order_profiles.db.repositories.base import BaseRepository, log_operation, with_retry
from order_profiles.domain.models import Profile

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = (
    "type",
    "uid",
    "country_code",
    "administrative_area",
    "locality",
    "postal_code",
    "address_line1",
    "address_line2",
    "given_name",
    "family_name",
    "organization",
)

_SELECT_PROFILE = f"SELECT id, {', '.join(PROFILE_COLUMNS)} FROM profiles"


class ProfileRepository(BaseRepository):
    """Repository for customer profiles."""

    TABLES = ("profiles",)
    ENTITY = "profile"

    @with_retry()
    @log_operation()
    async def load(self, profile_id: int) -> Optional[Profile]:
        """Load a profile by ID, or None when it does not exist."""
        try:
            async with self.get_session() as session:
                profiles = await self.load_many(session, [profile_id])
                return profiles.get(profile_id)
        except Exception as e:
            raise self._persistence_error(e, "load", profile_id) from e

    @staticmethod
    async def load_many(session: AsyncSession, profile_ids: Iterable[int]) -> dict[int, Profile]:
        """
        Load several profiles inside an existing session.

        Returns:
            dict: Profiles keyed by ID; missing IDs are absent
        """
        ids = sorted({profile_id for profile_id in profile_ids if profile_id is not None})
        if not ids:
            return {}

        placeholders = ", ".join(f":id_{index}" for index in range(len(ids)))
        params = {f"id_{index}": profile_id for index, profile_id in enumerate(ids)}
        result = await session.execute(text(f"{_SELECT_PROFILE} WHERE id IN ({placeholders})"), params)

        return {row["id"]: Profile.from_dict(dict(row)) for row in result.mappings()}

    @log_operation()
    async def save(self, profile: Profile) -> Profile:
        """
        Insert or update a profile.

        Returns:
            Profile: The same object, with ``id`` set after an insert
        """
        params: dict[str, Any] = {"type": profile.type.value, "uid": profile.uid, **profile.address.to_dict()}

        try:
            async with self.get_session() as session:
                if not profile.is_new:
                    assignments = ", ".join(f"{column} = :{column}" for column in PROFILE_COLUMNS)
                    result = await session.execute(
                        text(f"UPDATE profiles SET {assignments} WHERE id = :id"), {**params, "id": profile.id}
                    )
                    if result.rowcount == 0:
                        await self._insert(session, params, profile.id)
                else:
                    profile.id = await self._insert(session, params)

                await session.commit()
        except Exception as e:
            raise self._persistence_error(e, "save", profile.id) from e

        logger.debug(f"Saved profile {profile.id} as {profile.type.value}")
        return profile

    async def duplicate(self, profile: Profile) -> Profile:
        """
        Create an unsaved copy of a profile.

        The copy gets its fresh ID when it is saved.
        """
        return profile.duplicate()

    @staticmethod
    async def _insert(session: AsyncSession, params: dict[str, Any], profile_id: Optional[int] = None) -> int:
        columns = list(PROFILE_COLUMNS)
        values = dict(params)
        if profile_id is not None:
            columns.insert(0, "id")
            values["id"] = profile_id

        query = (
            f"INSERT INTO profiles ({', '.join(columns)}) "
            f"VALUES ({', '.join(':' + column for column in columns)}) RETURNING id"
        )
        result = await session.execute(text(query), values)
        return int(result.scalar_one())
