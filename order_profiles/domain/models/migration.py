"""
Per-order outcome records produced by the profile migration.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from order_profiles.utils.error_handler import AppException, ErrorCode


class MigrationStatus(str, Enum):
    """Outcome of migrating one order."""

    MIGRATED = "migrated"
    SKIPPED_NO_BILLING_PROFILE = "skipped-no-billing-profile"
    FAILED = "failed"


@dataclass
class ReclassifyResult:
    """
    Outcome of reclassifying the profiles of a single order.

    Attributes:
        order_id: Order the outcome belongs to
        status: Migration status
        error: Causing error when ``status`` is FAILED
        created_profile_ids: Shipping profiles created by splitting a shared profile
    """

    order_id: Any
    status: MigrationStatus
    error: Exception | None = None
    created_profile_ids: list[int] = field(default_factory=list)

    @property
    def is_migrated(self) -> bool:
        return self.status == MigrationStatus.MIGRATED

    @property
    def is_failed(self) -> bool:
        return self.status == MigrationStatus.FAILED

    @classmethod
    def migrated(cls, order_id: Any, created_profile_ids: list[int] | None = None) -> "ReclassifyResult":
        return cls(order_id=order_id, status=MigrationStatus.MIGRATED, created_profile_ids=created_profile_ids or [])

    @classmethod
    def skipped(cls, order_id: Any) -> "ReclassifyResult":
        return cls(order_id=order_id, status=MigrationStatus.SKIPPED_NO_BILLING_PROFILE)

    @classmethod
    def failed(
        cls, order_id: Any, error: Exception, created_profile_ids: list[int] | None = None
    ) -> "ReclassifyResult":
        return cls(
            order_id=order_id,
            status=MigrationStatus.FAILED,
            error=error,
            created_profile_ids=created_profile_ids or [],
        )

    def to_dict(self) -> dict[str, Any]:
        """Serializable form used by checkpoints and API responses."""
        error = None
        if self.error is not None:
            error = {
                "type": type(self.error).__name__,
                "message": getattr(self.error, "message", str(self.error)),
            }
        return {
            "order_id": self.order_id,
            "status": self.status.value,
            "error": error,
            "created_profile_ids": list(self.created_profile_ids),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReclassifyResult":
        """Rebuild an outcome; errors come back as plain AppException instances."""
        error = None
        if data.get("error"):
            error = AppException(
                message=data["error"].get("message", ""),
                error_code=ErrorCode.UNKNOWN_ERROR,
                details={"original_exception": data["error"].get("type")},
            )
        return cls(
            order_id=data["order_id"],
            status=MigrationStatus(data["status"]),
            error=error,
            created_profile_ids=list(data.get("created_profile_ids") or []),
        )
