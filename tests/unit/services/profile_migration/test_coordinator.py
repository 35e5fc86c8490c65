"""Tests unitarios para MigrationBatchCoordinator."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from order_profiles.domain.models import ReclassifyResult
from order_profiles.services.profile_migration import (
    BATCH_TITLE,
    MigrationBatchCoordinator,
    OrderProfileMigrationJob,
    ProfileReclassifier,
)
from order_profiles.services.profile_migration.coordinator import chunk_order_ids
from order_profiles.utils.error_handler import OrderNotFoundException


def build_coordinator(repositories, chunk_size=2) -> MigrationBatchCoordinator:
    reclassifier = ProfileReclassifier(
        profile_repository=repositories["profile_repository"],
        shipment_repository=repositories["shipment_repository"],
    )
    job = OrderProfileMigrationJob(order_repository=repositories["order_repository"], reclassifier=reclassifier)
    return MigrationBatchCoordinator(job, chunk_size=chunk_size, batch_id="test-batch")


class TestChunking:
    """División de IDs en chunks."""

    def test_chunks_cover_every_id_in_order(self):
        """Debe cubrir cada ID exactamente una vez y en orden."""
        chunks = chunk_order_ids([1, 2, 3, 4, 5], 2)

        assert chunks == [[1, 2], [3, 4], [5]]
        assert [order_id for chunk in chunks for order_id in chunk] == [1, 2, 3, 4, 5]

    @pytest.mark.parametrize("chunk_size", [0, None])
    def test_no_chunk_size_means_single_chunk(self, chunk_size):
        """Debe procesar todos los IDs en una sola operación."""
        assert chunk_order_ids([1, 2, 3], chunk_size) == [[1, 2, 3]]

    def test_empty_ids(self):
        """Debe devolver una lista vacía sin IDs."""
        assert chunk_order_ids([], 10) == []


class TestBuildBatch:
    """Construcción del BatchJob."""

    def test_batch_has_one_operation_per_chunk(self, repositories):
        """Debe crear una operación step por chunk con el título del batch."""
        coordinator = build_coordinator(repositories, chunk_size=2)

        batch = coordinator.build_batch([10, 11, 12])

        assert batch.title == BATCH_TITLE == "Migrating Order Profiles..."
        assert [operation.args for operation in batch.operations] == [([10, 11],), ([12],)]
        assert all(operation.callback == coordinator.step for operation in batch.operations)
        assert batch.finished == coordinator.finish
        assert batch.on_resume == coordinator.restore
        assert batch.batch_id == "test-batch"
        assert coordinator.aggregate.order_ids == [10, 11, 12]

    def test_operation_name(self, repositories):
        """Debe nombrar la operación por clase y método."""
        batch = build_coordinator(repositories).build_batch([1])

        assert batch.operations[0].name == "MigrationBatchCoordinator.step"


class TestStep:
    """Ejecución de un chunk."""

    @pytest.mark.asyncio
    async def test_step_merges_into_aggregate(self, store, repositories):
        """Debe delegar en el job y acumular los resultados."""
        for order_id in (1, 2):
            profile_id = store.add_profile()
            store.add_order(order_id, billing_profile_id=profile_id, shipping_profile_ids=(profile_id,))
        coordinator = build_coordinator(repositories)
        coordinator.start([1, 2, 3])

        results = await coordinator.step([1, 2])

        assert [result.order_id for result in results] == [1, 2]
        assert coordinator.aggregate.processed_ids == [1, 2]
        assert coordinator.aggregate.remaining_ids == [3]
        assert coordinator.tracker.processed_orders == 2
        assert coordinator.tracker.stats["created_profiles"] == 2

    @pytest.mark.asyncio
    async def test_step_delegates_to_job(self):
        """Debe invocar job.run con el chunk recibido."""
        job = MagicMock()
        job.run = AsyncMock(return_value=[ReclassifyResult.skipped(5)])
        coordinator = MigrationBatchCoordinator(job, chunk_size=10, batch_id="b")
        coordinator.start([5])

        results = await coordinator.step([5])

        job.run.assert_awaited_once_with([5])
        assert results[0].order_id == 5
        assert coordinator.tracker.stats["skipped"] == 1

    @pytest.mark.asyncio
    async def test_step_aggregates_failed_orders(self):
        """Debe registrar los pedidos fallidos en el agregador de errores."""
        job = MagicMock()
        job.run = AsyncMock(
            return_value=[ReclassifyResult.migrated(1), ReclassifyResult.failed(2, OrderNotFoundException(2))]
        )
        coordinator = MigrationBatchCoordinator(job, chunk_size=10, batch_id="b")
        coordinator.start([1, 2])

        await coordinator.step([1, 2])

        summary = coordinator.errors.get_summary()
        assert summary["total_processed"] == 2
        assert summary["error_count"] == 1
        assert summary["errors"][0]["details"]["order_id"] == 2


class TestFinish:
    """Mensaje final del batch."""

    def test_success_message_lists_migrated_orders(self, repositories):
        """Debe listar los pedidos migrados."""
        coordinator = build_coordinator(repositories)
        results = [ReclassifyResult.migrated(1), ReclassifyResult.migrated(2, [9])]

        report = coordinator.finish(True, results, [])

        assert report.success
        assert report.message == (
            "The following orders were successfully migrated to use separate profile types "
            "for billing and shipping: 1, 2."
        )
        assert report.migrated_ids == [1, 2]
        assert report.created_profile_ids == [9]
        assert coordinator.report is report

    def test_success_message_mentions_skipped_and_failed(self, repositories):
        """Debe agregar los pedidos omitidos y fallidos al mensaje."""
        coordinator = build_coordinator(repositories)
        results = [
            ReclassifyResult.migrated(1),
            ReclassifyResult.skipped(2),
            ReclassifyResult.failed(3, OrderNotFoundException(3)),
        ]

        report = coordinator.finish(True, results, [])

        assert report.skipped_ids == [2]
        assert report.failed_ids == [3]
        assert "Skipped orders without billing profile: 2." in report.message
        assert "Failed orders: 3." in report.message

    def test_failure_message_names_operation_and_arguments(self, repositories):
        """Debe identificar la operación fallida, sus argumentos y los IDs procesados."""
        coordinator = build_coordinator(repositories)
        batch = coordinator.build_batch([1, 2, 3, 4])
        results = [ReclassifyResult.migrated(1), ReclassifyResult.migrated(2)]

        report = coordinator.finish(False, results, batch.operations[1:])

        assert not report.success
        assert report.failed_operation == "MigrationBatchCoordinator.step"
        assert report.failed_arguments == ([3, 4],)
        assert report.message == (
            "An error occurred while processing MigrationBatchCoordinator.step with arguments: "
            "[[3, 4]] for the following order IDs: 1, 2."
        )

    def test_failure_message_keeps_processing_order(self, repositories):
        """Debe listar los IDs procesados en el orden de procesamiento."""
        coordinator = build_coordinator(repositories)
        batch = coordinator.build_batch([1, 2, 3, 4, 5])
        results = [
            ReclassifyResult.skipped(1),
            ReclassifyResult.failed(2, OrderNotFoundException(2)),
            ReclassifyResult.migrated(3),
            ReclassifyResult.migrated(4),
        ]

        report = coordinator.finish(False, results, batch.operations[2:])

        assert report.message.endswith("for the following order IDs: 1, 2, 3, 4.")

    def test_report_to_dict(self, repositories):
        """Debe serializar el reporte."""
        report = build_coordinator(repositories).finish(True, [ReclassifyResult.migrated(1)], [])

        data = report.to_dict()

        assert data["success"] is True
        assert data["migrated_ids"] == [1]
        assert data["failed_arguments"] is None


class TestRestore:
    """Reanudación desde checkpoint."""

    def test_restore_accepts_serialized_results(self, repositories):
        """Debe reconstruir resultados serializados y sembrar el agregado."""
        coordinator = build_coordinator(repositories)
        coordinator.start([1, 2, 3])
        serialized = [
            ReclassifyResult.migrated(1, [4]).to_dict(),
            ReclassifyResult.failed(2, OrderNotFoundException(2)).to_dict(),
        ]

        restored = coordinator.restore(serialized)

        assert [result.order_id for result in restored] == [1, 2]
        assert restored[0].created_profile_ids == [4]
        assert restored[1].is_failed
        assert "could not be loaded" in restored[1].error.message
        assert coordinator.aggregate.remaining_ids == [3]
