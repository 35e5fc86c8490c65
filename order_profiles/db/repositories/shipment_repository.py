"""
ShipmentRepository: shipment persistence.

Only the shipping-profile reference of a shipment is stored here.
"""

import logging
from typing import Optional

from sqlalchemy import text

from order_profiles.db.repositories.base import BaseRepository, log_operation
from order_profiles.domain.models import Shipment

logger = logging.getLogger(__name__)


class ShipmentRepository(BaseRepository):
    """Repository for order shipments."""

    TABLES = ("shipments",)
    ENTITY = "shipment"

    @log_operation()
    async def save(self, shipment: Shipment) -> Shipment:
        """
        Insert or update a shipment and its shipping-profile reference.

        Returns:
            Shipment: The same object, with ``id`` set after an insert
        """
        params = {"order_id": shipment.order_id, "shipping_profile_id": shipment.shipping_profile_id}

        try:
            async with self.get_session() as session:
                updated = 0
                if shipment.id is not None:
                    result = await session.execute(
                        text(
                            "UPDATE shipments SET order_id = :order_id, shipping_profile_id = :shipping_profile_id "
                            "WHERE id = :id"
                        ),
                        {**params, "id": shipment.id},
                    )
                    updated = result.rowcount

                if not updated:
                    shipment.id = await self._insert(session, params, shipment.id)

                await session.commit()
        except Exception as e:
            raise self._persistence_error(e, "save", shipment.id) from e

        logger.debug(f"Saved shipment {shipment.id} -> shipping profile {shipment.shipping_profile_id}")
        return shipment

    @staticmethod
    async def _insert(session, params: dict, shipment_id: Optional[int]) -> int:
        if shipment_id is None:
            query = (
                "INSERT INTO shipments (order_id, shipping_profile_id) "
                "VALUES (:order_id, :shipping_profile_id) RETURNING id"
            )
        else:
            query = (
                "INSERT INTO shipments (id, order_id, shipping_profile_id) "
                "VALUES (:id, :order_id, :shipping_profile_id) RETURNING id"
            )
            params = {**params, "id": shipment_id}

        result = await session.execute(text(query), params)
        return int(result.scalar_one())
