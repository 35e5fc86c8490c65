"""
ProfileReclassifier - splits shared customer profiles of one order.

After an order type switches to separate profile types, every historical
order must reference a billing-typed billing profile and shipping-typed
shipping profiles, with no profile instance used in both roles.

Known semantics:
- An order without billing profile is skipped entirely, shipments included.
- Mutations are not rolled back when a later save of the same order fails.
"""

import logging

from order_profiles.domain.models import Order, ProfileType, ReclassifyResult
from order_profiles.utils.error_handler import convert_to_app_exception, log_error

from .interfaces import IProfileRepository, IShipmentRepository

logger = logging.getLogger(__name__)


class ProfileReclassifier:
    """
    Relabels or clones the profiles of a single order.

    Dependencies are injected via constructor (DIP).
    """

    def __init__(self, profile_repository: IProfileRepository, shipment_repository: IShipmentRepository):
        """
        Args:
            profile_repository: Profile storage (save, duplicate)
            shipment_repository: Shipment storage (save)
        """
        self.profile_repository = profile_repository
        self.shipment_repository = shipment_repository

    async def reclassify(self, order: Order) -> ReclassifyResult:
        """
        Reclassify the billing and shipping profiles of an order.

        Returns:
            ReclassifyResult: migrated, skipped-no-billing-profile or failed
        """
        if not order.has_billing_profile:
            logger.info(f"Order {order.id} has no billing profile, skipping")
            return ReclassifyResult.skipped(order.id)

        created_profile_ids: list[int] = []

        try:
            billing_profile = order.billing_profile
            billing_profile.relabel(ProfileType.BILLING)
            await self.profile_repository.save(billing_profile)

            for shipment in order.shipments:
                shipping_profile = shipment.shipping_profile
                if shipping_profile is None:
                    logger.warning(f"Shipment {shipment.id} of order {order.id} has no shipping profile, skipping")
                    continue

                if shipping_profile.id != billing_profile.id:
                    shipping_profile.relabel(ProfileType.SHIPPING)
                    await self.profile_repository.save(shipping_profile)
                    continue

                # Shared profile: the billing side keeps the original ID
                copy = await self.profile_repository.duplicate(shipping_profile)
                copy.relabel(ProfileType.SHIPPING)
                await self.profile_repository.save(copy)
                created_profile_ids.append(copy.id)

                shipment.set_shipping_profile(copy)
                await self.shipment_repository.save(shipment)
                logger.debug(
                    f"Order {order.id}: split profile {billing_profile.id} into shipping profile {copy.id} "
                    f"for shipment {shipment.id}"
                )

        except Exception as e:
            error = convert_to_app_exception(e, {"order_id": order.id})
            log_error(error, {"order_id": order.id, "created_profile_ids": created_profile_ids})
            return ReclassifyResult.failed(order.id, error, created_profile_ids)

        return ReclassifyResult.migrated(order.id, created_profile_ids)
