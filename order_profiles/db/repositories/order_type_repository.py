"""
OrderTypeRepository: order type configuration persistence.
"""

import logging
from typing import Optional

from sqlalchemy import text

from order_profiles.db.repositories.base import BaseRepository, log_operation, with_retry
from order_profiles.domain.models import OrderType
from order_profiles.utils.error_handler import ValidationException

logger = logging.getLogger(__name__)


class OrderTypeRepository(BaseRepository):
    """Repository for order types."""

    TABLES = ("order_types",)
    ENTITY = "order_type"

    @with_retry()
    @log_operation()
    async def load(self, order_type_id: str) -> Optional[OrderType]:
        """Load an order type, or None when it does not exist."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text("SELECT id, label, use_multiple_profile_types FROM order_types WHERE id = :id"),
                    {"id": order_type_id},
                )
                row = result.mappings().first()
        except Exception as e:
            raise self._persistence_error(e, "load", order_type_id) from e

        return OrderType.from_dict(dict(row)) if row else None

    @log_operation()
    async def save(self, order_type: OrderType) -> OrderType:
        """
        Insert or update an order type.

        Raises:
            ValidationException: If the save would switch an order type back
                to a single profile type
        """
        params = order_type.to_dict()

        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text("SELECT use_multiple_profile_types FROM order_types WHERE id = :id"), {"id": order_type.id}
                )
                current = result.scalar_one_or_none()

                if current is None:
                    await session.execute(
                        text(
                            "INSERT INTO order_types (id, label, use_multiple_profile_types) "
                            "VALUES (:id, :label, :use_multiple_profile_types)"
                        ),
                        params,
                    )
                else:
                    if bool(current) and not order_type.use_multiple_profile_types:
                        raise ValidationException(
                            message=f"Order type '{order_type.id}' cannot switch back to a single profile type",
                            field="use_multiple_profile_types",
                            invalid_value=False,
                        )
                    await session.execute(
                        text(
                            "UPDATE order_types SET label = :label, "
                            "use_multiple_profile_types = :use_multiple_profile_types WHERE id = :id"
                        ),
                        params,
                    )
                await session.commit()
        except Exception as e:
            raise self._persistence_error(e, "save", order_type.id) from e

        logger.info(
            f"Saved order type '{order_type.id}' "
            f"(multiple profile types: {order_type.use_multiple_profile_types})"
        )
        return order_type
