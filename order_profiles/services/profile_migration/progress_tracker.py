import logging
import time
from typing import Any, Dict

logger = logging.getLogger(__name__)


class MigrationProgressTracker:
    """Tracker de progreso de la migración de perfiles con ETA y métricas."""

    def __init__(self, total_orders: int, operation_name: str = "Profile migration", batch_id: str = "unknown"):
        self.total_orders = total_orders
        self.operation_name = operation_name
        self.batch_id = batch_id
        self.processed_orders = 0
        self.start_time = time.time()
        self.last_log_time = self.start_time
        self.stats = {"migrated": 0, "skipped": 0, "failed": 0, "created_profiles": 0}

    def update(self, migrated: int = 0, skipped: int = 0, failed: int = 0, created_profiles: int = 0):
        """Registra un pedido procesado."""
        self.processed_orders += 1
        self.stats["migrated"] += migrated
        self.stats["skipped"] += skipped
        self.stats["failed"] += failed
        self.stats["created_profiles"] += created_profiles

    def record(self, result) -> None:
        """Registra el resultado de un pedido (ReclassifyResult)."""
        self.update(
            migrated=int(result.is_migrated),
            skipped=int(not result.is_migrated and not result.is_failed),
            failed=int(result.is_failed),
            created_profiles=len(result.created_profile_ids),
        )

    def get_progress_info(self) -> Dict[str, Any]:
        """Obtiene información completa del progreso."""
        elapsed = time.time() - self.start_time

        if self.processed_orders == 0 or self.total_orders == 0:
            return {
                "percentage": 0.0,
                "eta_seconds": 0,
                "rate_per_minute": 0.0,
                "elapsed_str": "00:00:00",
                "eta_str": "00:00:00",
                "processed": self.processed_orders,
                "total": self.total_orders,
            }

        percentage = (self.processed_orders / self.total_orders) * 100
        rate_per_minute = (self.processed_orders / elapsed) * 60 if elapsed > 0 else 0

        remaining = self.total_orders - self.processed_orders
        eta_seconds = (remaining / rate_per_minute) * 60 if rate_per_minute > 0 else 0

        return {
            "percentage": percentage,
            "eta_seconds": eta_seconds,
            "rate_per_minute": rate_per_minute,
            "elapsed_str": self._format_duration(elapsed),
            "eta_str": self._format_duration(eta_seconds),
            "processed": self.processed_orders,
            "total": self.total_orders,
        }

    def log_progress(self, prefix: str = ""):
        """Hace log del progreso actual."""
        info = self.get_progress_info()
        self.last_log_time = time.time()

        logger.info(
            f"{prefix}{self.operation_name} [batch_id: {self.batch_id}]: "
            f"{info['processed']}/{info['total']} ({info['percentage']:.1f}%) | "
            f"{info['elapsed_str']} elapsed, ETA: {info['eta_str']} | "
            f"{self.stats['migrated']} migrated, "
            f"{self.stats['skipped']} skipped, "
            f"{self.stats['failed']} failed, "
            f"{self.stats['created_profiles']} shipping profiles created"
        )

    @staticmethod
    def _format_duration(seconds: float) -> str:
        """Formatea duración en formato HH:MM:SS."""
        if seconds < 0:
            return "00:00:00"
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = int(seconds % 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
