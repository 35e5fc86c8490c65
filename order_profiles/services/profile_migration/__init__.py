"""
Order profile migration services.

Moves historical orders from one shared customer profile type to
separate billing and shipping profile types.
"""

from .batch import InProcessBatchRunner
from .checkpoint import MigrationCheckpointManager
from .coordinator import BATCH_TITLE, MigrationAggregate, MigrationBatchCoordinator, MigrationReport
from .interfaces import BatchJob, BatchOperation
from .job import OrderProfileMigrationJob
from .profile_types import ProfileTypeInstaller
from .reclassifier import ProfileReclassifier
from .switcher import OrderTypeSwitcher, create_switcher, migration_batch_id

__all__ = [
    "BATCH_TITLE",
    "BatchJob",
    "BatchOperation",
    "InProcessBatchRunner",
    "MigrationAggregate",
    "MigrationBatchCoordinator",
    "MigrationCheckpointManager",
    "MigrationReport",
    "OrderProfileMigrationJob",
    "OrderTypeSwitcher",
    "ProfileReclassifier",
    "ProfileTypeInstaller",
    "create_switcher",
    "migration_batch_id",
]
