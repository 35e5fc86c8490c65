"""
OrderTypeSwitcher - switches an order type to separate profile types.

Coordinates the whole switch:
- Confirmation data for the operator (describe)
- Profile type installation and custom field copy
- Migration batch over the existing orders
- The one-way flag change, only after a successful batch
"""

import logging
from typing import Any, Optional

from order_profiles.domain.models import OrderType
from order_profiles.utils.error_handler import OrderTypeNotFoundException, ValidationException

from .batch import InProcessBatchRunner
from .coordinator import MigrationBatchCoordinator, MigrationReport
from .interfaces import (
    IBatchScheduler,
    IOrderRepository,
    IOrderTypeRepository,
    IProfileRepository,
    IProfileTypeRepository,
    IShipmentRepository,
)
from .job import OrderProfileMigrationJob
from .profile_types import ProfileTypeInstaller
from .reclassifier import ProfileReclassifier

logger = logging.getLogger(__name__)

CONFIRM_LABEL = "Switch to Multiple Profile Types"


def migration_batch_id(order_type_id: str) -> str:
    """Stable batch ID so a failed switch of the same order type can resume."""
    return f"profile-migration-{order_type_id}"


class OrderTypeSwitcher:
    """
    Switches order types from one shared profile type to billing/shipping types.

    Dependencies are injected via constructor (DIP).
    """

    def __init__(
        self,
        order_type_repository: IOrderTypeRepository,
        order_repository: IOrderRepository,
        installer: ProfileTypeInstaller,
        job: OrderProfileMigrationJob,
        scheduler: IBatchScheduler,
        chunk_size: Optional[int] = None,
    ):
        """
        Args:
            order_type_repository: Order type configuration storage
            order_repository: Order storage, used to list the orders to migrate
            installer: Creates the profile types and copies custom fields
            job: Migration job handed to each batch coordinator
            scheduler: Batch scheduler executing the migration
            chunk_size: Default orders per batch operation
        """
        self.order_type_repository = order_type_repository
        self.order_repository = order_repository
        self.installer = installer
        self.job = job
        self.scheduler = scheduler
        self.chunk_size = chunk_size

    async def _load_order_type(self, order_type_id: str) -> OrderType:
        order_type = await self.order_type_repository.load(order_type_id)
        if order_type is None:
            raise OrderTypeNotFoundException(order_type_id)
        return order_type

    async def describe(self, order_type_id: str) -> dict[str, Any]:
        """Confirmation data shown before switching an order type."""
        order_type = await self._load_order_type(order_type_id)
        order_count = await self.order_repository.count(order_type_id)

        return {
            "order_type_id": order_type.id,
            "label": order_type.label,
            "use_multiple_profile_types": order_type.use_multiple_profile_types,
            "question": f"Are you sure you want to switch the {order_type.label} order type to multiple profile types?",
            "order_count": order_count,
            "billing_profile_type": order_type.billing_profile_type_id.value,
            "shipping_profile_type": order_type.shipping_profile_type_id.value,
            "warning": (
                f"The {order_count} existing orders will be migrated to separate billing and shipping "
                "profiles. This action cannot be undone."
            ),
            "confirm_label": CONFIRM_LABEL,
        }

    async def switch(
        self, order_type_id: str, chunk_size: Optional[int] = None, resume: bool = False
    ) -> MigrationReport:
        """
        Switch an order type to separate billing and shipping profile types.

        Args:
            order_type_id: Order type to switch
            chunk_size: Orders per batch operation (default: switcher/settings value)
            resume: Continue a previously failed migration of this order type

        Returns:
            MigrationReport: Report of the migration batch

        Raises:
            OrderTypeNotFoundException: If the order type does not exist
            ValidationException: If the order type already uses multiple profile types
        """
        order_type = await self._load_order_type(order_type_id)
        if order_type.use_multiple_profile_types:
            raise ValidationException(
                message=f"Order type '{order_type_id}' already uses multiple profile types",
                field="use_multiple_profile_types",
                invalid_value=True,
            )

        await self.installer.ensure_profile_types()
        await self.installer.copy_custom_fields()

        order_ids = await self.order_repository.query(order_type_id)
        coordinator = MigrationBatchCoordinator(
            self.job,
            chunk_size=self.chunk_size if chunk_size is None else chunk_size,
            batch_id=migration_batch_id(order_type_id),
        )
        report: MigrationReport = await self.scheduler.run(coordinator.build_batch(order_ids), resume=resume)

        if report.success:
            order_type.enable_multiple_profile_types()
            await self.order_type_repository.save(order_type)
            logger.info(f"Order type '{order_type_id}' now uses multiple profile types")
        else:
            logger.warning(f"Order type '{order_type_id}' left unchanged: {report.message}")

        return report


# Factory function to create the switcher with all dependencies
def create_switcher(
    order_repository: IOrderRepository,
    profile_repository: IProfileRepository,
    shipment_repository: IShipmentRepository,
    order_type_repository: IOrderTypeRepository,
    profile_type_repository: IProfileTypeRepository,
    scheduler: Optional[IBatchScheduler] = None,
    chunk_size: Optional[int] = None,
) -> OrderTypeSwitcher:
    """
    Factory function to create a fully wired OrderTypeSwitcher.

    Args:
        order_repository: Order storage
        profile_repository: Profile storage
        shipment_repository: Shipment storage
        order_type_repository: Order type configuration storage
        profile_type_repository: Profile type configuration storage
        scheduler: Batch scheduler (default: InProcessBatchRunner)
        chunk_size: Default orders per batch operation

    Returns:
        OrderTypeSwitcher: Fully configured switcher
    """
    reclassifier = ProfileReclassifier(profile_repository=profile_repository, shipment_repository=shipment_repository)
    job = OrderProfileMigrationJob(order_repository=order_repository, reclassifier=reclassifier)

    return OrderTypeSwitcher(
        order_type_repository=order_type_repository,
        order_repository=order_repository,
        installer=ProfileTypeInstaller(profile_type_repository),
        job=job,
        scheduler=scheduler or InProcessBatchRunner(),
        chunk_size=chunk_size,
    )
