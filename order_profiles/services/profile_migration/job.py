"""
OrderProfileMigrationJob - runs the reclassifier over a set of order IDs.
"""

import logging
from typing import Any, Sequence

from order_profiles.domain.models import ReclassifyResult
from order_profiles.utils.error_handler import (
    AppException,
    OrderNotFoundException,
    PersistenceException,
    log_error,
)

from .interfaces import IOrderRepository
from .reclassifier import ProfileReclassifier

logger = logging.getLogger(__name__)


class OrderProfileMigrationJob:
    """
    Migrates orders one by one; a failing order never stops the run.
    """

    def __init__(self, order_repository: IOrderRepository, reclassifier: ProfileReclassifier):
        self.order_repository = order_repository
        self.reclassifier = reclassifier

    async def run(self, order_ids: Sequence[Any]) -> list[ReclassifyResult]:
        """
        Migrate every order in ``order_ids``.

        Returns:
            list[ReclassifyResult]: One outcome per requested ID, in input order
        """
        results = []
        for order_id in order_ids:
            results.append(await self.migrate_order(order_id))

        failed = sum(1 for result in results if result.is_failed)
        logger.debug(f"Migrated chunk of {len(results)} orders ({failed} failed)")
        return results

    async def migrate_order(self, order_id: Any) -> ReclassifyResult:
        """Load one order and reclassify its profiles."""
        try:
            order = await self.order_repository.load(order_id)
        except Exception as e:
            error = e
            if not isinstance(e, AppException):
                error = PersistenceException(
                    message=f"order load failed: {e}", entity="order", entity_id=order_id, operation="load"
                )
            log_error(error, {"order_id": order_id})
            return ReclassifyResult.failed(order_id, error)

        if order is None:
            error = OrderNotFoundException(order_id)
            logger.warning(error.message)
            return ReclassifyResult.failed(order_id, error)

        return await self.reclassifier.reclassify(order)
