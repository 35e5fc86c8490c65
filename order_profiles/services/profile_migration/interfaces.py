"""
Interfaces/Protocols for the profile migration (Dependency Inversion Principle).

These protocols define the storage and scheduling contracts the migration
consumes, allowing the SQL repositories and the in-process batch runner to
be swapped for fakes in tests.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

from order_profiles.domain.models import (
    FieldDefinition,
    Order,
    OrderType,
    Profile,
    ProfileTypeDefinition,
    Shipment,
)


class IOrderRepository(Protocol):
    """Protocol for order storage."""

    async def load(self, order_id: int) -> Optional[Order]:
        """Load an order aggregate, None when it does not exist."""
        ...

    async def query(self, order_type_id: str) -> list[int]:
        """IDs of every order of an order type."""
        ...

    async def count(self, order_type_id: str) -> int:
        """Number of orders of an order type."""
        ...


class IProfileRepository(Protocol):
    """Protocol for profile storage."""

    async def save(self, profile: Profile) -> Profile:
        """Upsert a profile; inserts assign a fresh ID."""
        ...

    async def duplicate(self, profile: Profile) -> Profile:
        """Copy a profile's fields into a new, unsaved profile."""
        ...


class IShipmentRepository(Protocol):
    """Protocol for shipment storage."""

    async def save(self, shipment: Shipment) -> Shipment:
        """Upsert a shipment."""
        ...


class IOrderTypeRepository(Protocol):
    """Protocol for order type configuration."""

    async def load(self, order_type_id: str) -> Optional[OrderType]:
        ...

    async def save(self, order_type: OrderType) -> OrderType:
        ...


class IProfileTypeRepository(Protocol):
    """Protocol for profile type configuration."""

    async def load(self, profile_type_id: str) -> Optional[ProfileTypeDefinition]:
        ...

    async def create(
        self, profile_type: ProfileTypeDefinition, fields: list[FieldDefinition] | None = None
    ) -> ProfileTypeDefinition:
        ...

    async def get_field_definitions(self, profile_type_id: str) -> dict[str, FieldDefinition]:
        ...

    async def add_field_definition(self, field_definition: FieldDefinition) -> FieldDefinition:
        ...


@dataclass
class BatchOperation:
    """
    A unit of work handed to the batch scheduler.

    Attributes:
        callback: Callable invoked with ``args``; may be sync or async
        args: Positional arguments for the callback
    """

    callback: Callable[..., Any]
    args: tuple = ()

    @property
    def name(self) -> str:
        """Readable name of the callback, used in failure reports."""
        owner = getattr(self.callback, "__self__", None)
        func_name = getattr(self.callback, "__name__", repr(self.callback))
        return f"{type(owner).__name__}.{func_name}" if owner is not None else func_name

    async def execute(self) -> Any:
        """Run the callback and return its result."""
        result = self.callback(*self.args)
        if inspect.isawaitable(result):
            result = await result
        return result


@dataclass
class BatchJob:
    """
    Job description accepted by a batch scheduler.

    ``finished`` receives (success, accumulated results, remaining operations).
    ``on_resume`` receives the results restored from a checkpoint and returns
    them in their in-memory form.
    """

    title: str
    operations: list[BatchOperation]
    finished: Callable[[bool, list, list[BatchOperation]], Any]
    on_resume: Optional[Callable[[list], list]] = None
    batch_id: str = "batch"
    metadata: dict[str, Any] = field(default_factory=dict)


class IBatchScheduler(Protocol):
    """Protocol for batch execution."""

    async def run(self, job: BatchJob, resume: bool = False) -> Any:
        """Execute every operation of the job, then its finish callback."""
        ...
