"""
MigrationBatchCoordinator - chunked execution and final report.

The coordinator splits the order IDs into chunks, exposes one batch
operation per chunk to the scheduler, merges the per-order outcomes and
builds the message shown to the operator when the batch finishes.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from order_profiles.core.config import get_settings
from order_profiles.core.logging_config import LogContext
from order_profiles.domain.models import MigrationStatus, ReclassifyResult
from order_profiles.utils.error_handler import ErrorAggregator

from .interfaces import BatchJob, BatchOperation
from .job import OrderProfileMigrationJob
from .progress_tracker import MigrationProgressTracker

logger = logging.getLogger(__name__)

BATCH_TITLE = "Migrating Order Profiles..."


@dataclass
class MigrationAggregate:
    """In-flight results of a migration batch."""

    order_ids: list[Any] = field(default_factory=list)
    results: list[ReclassifyResult] = field(default_factory=list)

    def merge(self, results: Sequence[ReclassifyResult]) -> None:
        self.results.extend(results)

    @property
    def processed_ids(self) -> list[Any]:
        return [result.order_id for result in self.results]

    @property
    def remaining_ids(self) -> list[Any]:
        processed = set(self.processed_ids)
        return [order_id for order_id in self.order_ids if order_id not in processed]


@dataclass
class MigrationReport:
    """
    Final outcome of a migration batch.

    Attributes:
        success: Whether the scheduler ran every operation
        message: Human readable summary
        migrated_ids / skipped_ids / failed_ids: Order IDs per outcome
        failed_operation: Name of the operation that aborted the batch
        failed_arguments: Arguments of that operation
    """

    success: bool
    message: str
    migrated_ids: list[Any] = field(default_factory=list)
    skipped_ids: list[Any] = field(default_factory=list)
    failed_ids: list[Any] = field(default_factory=list)
    created_profile_ids: list[int] = field(default_factory=list)
    failed_operation: Optional[str] = None
    failed_arguments: Optional[tuple] = None

    @property
    def processed_ids(self) -> list[Any]:
        return self.migrated_ids + self.skipped_ids + self.failed_ids

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "migrated_ids": self.migrated_ids,
            "skipped_ids": self.skipped_ids,
            "failed_ids": self.failed_ids,
            "created_profile_ids": self.created_profile_ids,
            "failed_operation": self.failed_operation,
            "failed_arguments": repr(self.failed_arguments) if self.failed_arguments is not None else None,
        }


def chunk_order_ids(order_ids: Sequence[Any], chunk_size: Optional[int]) -> list[list[Any]]:
    """
    Split order IDs into consecutive chunks.

    A chunk size of 0 or None keeps every ID in a single chunk.
    """
    order_ids = list(order_ids)
    if not order_ids:
        return []
    if not chunk_size:
        return [order_ids]
    return [order_ids[index : index + chunk_size] for index in range(0, len(order_ids), chunk_size)]


def _format_ids(order_ids: Sequence[Any]) -> str:
    return ", ".join(str(order_id) for order_id in order_ids)


class MigrationBatchCoordinator:
    """
    Drives an OrderProfileMigrationJob across chunks of order IDs.

    One coordinator serves a single batch run; it keeps no state beyond the
    in-flight aggregate.
    """

    def __init__(
        self,
        job: OrderProfileMigrationJob,
        chunk_size: Optional[int] = None,
        batch_id: Optional[str] = None,
    ):
        """
        Args:
            job: Job migrating the orders of one chunk
            chunk_size: Orders per batch operation (default: settings.PROFILE_MIGRATION_CHUNK_SIZE)
            batch_id: Identifier used for logs and checkpoints
        """
        self.job = job
        self.chunk_size = get_settings().PROFILE_MIGRATION_CHUNK_SIZE if chunk_size is None else chunk_size
        self.batch_id = batch_id or f"profile-migration-{uuid.uuid4().hex[:8]}"
        self.aggregate = MigrationAggregate()
        self.tracker = MigrationProgressTracker(0, batch_id=self.batch_id)
        self.errors = ErrorAggregator()
        self.report: Optional[MigrationReport] = None

    def start(self, order_ids: Sequence[Any]) -> MigrationAggregate:
        """Register the full order ID set and reset the aggregate."""
        self.aggregate = MigrationAggregate(order_ids=list(order_ids))
        self.tracker = MigrationProgressTracker(len(self.aggregate.order_ids), batch_id=self.batch_id)
        self.errors = ErrorAggregator()
        self.report = None
        logger.info(f"Profile migration {self.batch_id} started for {len(self.aggregate.order_ids)} orders")
        return self.aggregate

    async def step(self, chunk: Sequence[Any]) -> list[ReclassifyResult]:
        """
        Migrate one chunk of orders.

        Returns:
            list[ReclassifyResult]: Outcomes of the chunk, in chunk order
        """
        with LogContext(batch_id=self.batch_id, operation="step"):
            results = await self.job.run(chunk)
            self.aggregate.merge(results)
            for result in results:
                self.tracker.record(result)
                self.errors.increment_processed()
                if result.is_failed:
                    self.errors.add_error(result.error, {"order_id": result.order_id})
            self.tracker.log_progress()
        return results

    def restore(self, results: Sequence[Any]) -> list[ReclassifyResult]:
        """
        Reseed the aggregate with results restored from a checkpoint.

        Accepts ReclassifyResult objects or their ``to_dict`` form.
        """
        restored = [
            result if isinstance(result, ReclassifyResult) else ReclassifyResult.from_dict(result)
            for result in results
        ]
        self.aggregate.merge(restored)
        for result in restored:
            self.tracker.record(result)
        self.errors.increment_processed(len(restored))
        logger.info(f"Profile migration {self.batch_id} resumed with {len(restored)} orders already processed")
        return restored

    def finish(
        self, success: bool, results: Sequence[ReclassifyResult], operations: Sequence[BatchOperation]
    ) -> MigrationReport:
        """
        Build the final report.

        Args:
            success: Whether every operation ran
            results: Outcomes accumulated by the scheduler
            operations: Operations left unprocessed; the first one is the one that failed
        """
        by_status: dict[MigrationStatus, list[Any]] = {status: [] for status in MigrationStatus}
        created_profile_ids: list[int] = []
        for result in results:
            by_status[result.status].append(result.order_id)
            created_profile_ids.extend(result.created_profile_ids)

        report = MigrationReport(
            success=success,
            message="",
            migrated_ids=by_status[MigrationStatus.MIGRATED],
            skipped_ids=by_status[MigrationStatus.SKIPPED_NO_BILLING_PROFILE],
            failed_ids=by_status[MigrationStatus.FAILED],
            created_profile_ids=created_profile_ids,
        )

        if success:
            report.message = self._success_message(report)
            logger.info(report.message)
            if self.errors.has_errors():
                summary = self.errors.get_summary()
                logger.warning(
                    f"Profile migration {self.batch_id}: {summary['error_count']} of "
                    f"{summary['total_processed']} orders failed"
                )
        else:
            failed_operation = operations[0] if operations else None
            report.failed_operation = failed_operation.name if failed_operation else "unknown"
            report.failed_arguments = failed_operation.args if failed_operation else ()
            report.message = (
                f"An error occurred while processing {report.failed_operation} with arguments: "
                f"{list(report.failed_arguments)!r} for the following order IDs: "
                f"{_format_ids([result.order_id for result in results])}."
            )
            logger.error(report.message)

        self.report = report
        return report

    def build_batch(self, order_ids: Sequence[Any]) -> BatchJob:
        """Build the batch job, one operation per chunk."""
        self.start(order_ids)
        operations = [
            BatchOperation(self.step, (chunk,)) for chunk in chunk_order_ids(self.aggregate.order_ids, self.chunk_size)
        ]
        return BatchJob(
            title=BATCH_TITLE,
            operations=operations,
            finished=self.finish,
            on_resume=self.restore,
            batch_id=self.batch_id,
            metadata={"total_orders": len(self.aggregate.order_ids), "chunk_size": self.chunk_size},
        )

    @staticmethod
    def _success_message(report: MigrationReport) -> str:
        message = (
            "The following orders were successfully migrated to use separate profile types "
            f"for billing and shipping: {_format_ids(report.migrated_ids)}."
        )
        if report.skipped_ids:
            message += f" Skipped orders without billing profile: {_format_ids(report.skipped_ids)}."
        if report.failed_ids:
            message += f" Failed orders: {_format_ids(report.failed_ids)}."
        return message
