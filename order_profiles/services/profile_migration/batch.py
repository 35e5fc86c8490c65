"""
InProcessBatchRunner - sequential batch scheduler.

Runs the operations of a BatchJob one after another on the current event
loop, accumulates the results they return and calls the job's finish
callback. Progress is checkpointed after each operation so a failed or
interrupted batch can be resumed.
"""

import inspect
import logging
from typing import Any, Optional

from order_profiles.core.logging_config import LogContext
from order_profiles.utils.error_handler import BatchOperationException, log_error

from .checkpoint import MigrationCheckpointManager
from .interfaces import BatchJob, BatchOperation

logger = logging.getLogger(__name__)


class InProcessBatchRunner:
    """
    Batch scheduler running every operation in-process.

    Stops at the first operation that raises and reports the remaining
    operations, failing one first, to the finish callback.
    """

    def __init__(self, use_checkpoints: bool = True, checkpoint_dir: Optional[str] = None):
        """
        Args:
            use_checkpoints: Save progress after each operation
            checkpoint_dir: Directory for checkpoint files (default: settings.CHECKPOINT_DIR)
        """
        self.use_checkpoints = use_checkpoints
        self.checkpoint_dir = checkpoint_dir

    async def run(self, job: BatchJob, resume: bool = False) -> Any:
        """
        Execute the job.

        Args:
            job: Job to execute
            resume: Skip operations completed by a previous run of the same batch ID

        Returns:
            Whatever the job's finish callback returns
        """
        checkpoint = None
        if self.use_checkpoints:
            checkpoint = MigrationCheckpointManager(job.batch_id, self.checkpoint_dir)
            await checkpoint.initialize()

        try:
            with LogContext(batch_id=job.batch_id, operation="batch"):
                results: list = []
                start_index = 0
                if resume and checkpoint:
                    start_index, results = await self._restore(job, checkpoint)

                return await self._execute(job, checkpoint, start_index, results)
        finally:
            if checkpoint:
                await checkpoint.close()

    async def _execute(
        self,
        job: BatchJob,
        checkpoint: Optional[MigrationCheckpointManager],
        start_index: int,
        results: list,
    ) -> Any:
        total = len(job.operations)
        logger.info(f"{job.title} [{job.batch_id}] {total} operations, starting at {start_index + 1}")

        for index in range(start_index, total):
            operation = job.operations[index]
            try:
                operation_results = await operation.execute()
            except Exception as e:
                error = BatchOperationException(
                    message=f"Operation {index + 1}/{total} ({operation.name}) failed: {e}",
                    operation=operation.name,
                    arguments=operation.args,
                    processed_ids=[getattr(result, "order_id", None) for result in results],
                )
                log_error(error, {"operation_index": index})
                if checkpoint:
                    await checkpoint.save_checkpoint(
                        index, total, self._serialize(results), status="failed", additional_data=job.metadata
                    )
                return await self._finish(job, False, results, job.operations[index:])

            results.extend(operation_results or [])
            if checkpoint:
                await checkpoint.save_checkpoint(
                    index + 1, total, self._serialize(results), additional_data=job.metadata
                )

        outcome = await self._finish(job, True, results, [])
        if checkpoint:
            await checkpoint.delete_checkpoint()
        return outcome

    async def _restore(self, job: BatchJob, checkpoint: MigrationCheckpointManager) -> tuple[int, list]:
        """Completed operation count and results from a previous run, (0, []) when none apply."""
        if not await checkpoint.should_resume():
            return 0, []

        data = await checkpoint.load_checkpoint()
        if data is None:
            return 0, []

        if data.get("total_operations") != len(job.operations) or data.get("additional_data") != job.metadata:
            logger.warning(f"Checkpoint for batch {job.batch_id} does not match the current job, starting fresh")
            return 0, []

        results = list(data.get("results", []))
        if job.on_resume:
            results = list(job.on_resume(results))

        logger.info(f"Resuming batch {job.batch_id} after {data['completed_operations']} completed operations")
        return data["completed_operations"], results

    @staticmethod
    async def _finish(job: BatchJob, success: bool, results: list, remaining: list[BatchOperation]) -> Any:
        outcome = job.finished(success, results, remaining)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome

    @staticmethod
    def _serialize(results: list) -> list:
        return [result.to_dict() if hasattr(result, "to_dict") else result for result in results]
