"""
OrderRepository: order loading and lookup by order type.

``load`` returns the order aggregate used by the profile migration: the
order, its billing profile and its shipments with their shipping profiles.
Profiles referenced more than once are returned as the same object.
"""

import logging
from typing import Optional

from sqlalchemy import text

from order_profiles.db.repositories.base import BaseRepository, log_operation, with_retry
from order_profiles.db.repositories.profile_repository import ProfileRepository
from order_profiles.domain.models import Order, Shipment

logger = logging.getLogger(__name__)


class OrderRepository(BaseRepository):
    """Repository for orders and their profile references."""

    TABLES = ("orders", "shipments", "profiles")
    ENTITY = "order"

    @with_retry()
    @log_operation()
    async def load(self, order_id: int) -> Optional[Order]:
        """
        Load an order with its billing profile and shipments.

        Returns:
            Order | None: None when the order does not exist
        """
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text("SELECT id, order_type, billing_profile_id FROM orders WHERE id = :id"), {"id": order_id}
                )
                row = result.mappings().first()
                if row is None:
                    return None

                shipment_rows = (
                    await session.execute(
                        text("SELECT id, shipping_profile_id FROM shipments WHERE order_id = :id ORDER BY id"),
                        {"id": order_id},
                    )
                ).mappings().all()

                profile_ids = [row["billing_profile_id"]] + [s["shipping_profile_id"] for s in shipment_rows]
                profiles = await ProfileRepository.load_many(session, profile_ids)
        except Exception as e:
            raise self._persistence_error(e, "load", order_id) from e

        billing_profile_id = row["billing_profile_id"]
        if billing_profile_id is not None and billing_profile_id not in profiles:
            logger.warning(f"Order {order_id} references missing billing profile {billing_profile_id}")

        return Order(
            id=row["id"],
            order_type_id=row["order_type"],
            billing_profile=profiles.get(billing_profile_id),
            shipments=[
                Shipment(
                    id=shipment["id"],
                    order_id=row["id"],
                    shipping_profile=profiles.get(shipment["shipping_profile_id"]),
                )
                for shipment in shipment_rows
            ],
        )

    @with_retry()
    @log_operation()
    async def query(self, order_type_id: str) -> list[int]:
        """
        Get the IDs of all orders of an order type, in ascending order.
        """
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text("SELECT id FROM orders WHERE order_type = :order_type ORDER BY id"),
                    {"order_type": order_type_id},
                )
                return [int(order_id) for order_id in result.scalars().all()]
        except Exception as e:
            raise self._persistence_error(e, "query") from e

    @with_retry()
    @log_operation()
    async def count(self, order_type_id: str) -> int:
        """Number of orders of an order type."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text("SELECT COUNT(*) FROM orders WHERE order_type = :order_type"), {"order_type": order_type_id}
                )
                return int(result.scalar() or 0)
        except Exception as e:
            raise self._persistence_error(e, "count") from e

    @log_operation()
    async def save(self, order: Order) -> Order:
        """
        Insert or update the order header (order type and billing profile).

        Shipments and profiles are saved through their own repositories.
        """
        params = {"id": order.id, "order_type": order.order_type_id, "billing_profile_id": order.billing_profile_id}

        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text(
                        "UPDATE orders SET order_type = :order_type, billing_profile_id = :billing_profile_id "
                        "WHERE id = :id"
                    ),
                    params,
                )
                if result.rowcount == 0:
                    await session.execute(
                        text(
                            "INSERT INTO orders (id, order_type, billing_profile_id) "
                            "VALUES (:id, :order_type, :billing_profile_id)"
                        ),
                        params,
                    )
                await session.commit()
        except Exception as e:
            raise self._persistence_error(e, "save", order.id) from e

        return order
