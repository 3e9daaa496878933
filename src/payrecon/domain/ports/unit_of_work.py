"""Transaction boundary over the payment store."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from payrecon.domain.ports.persistence import PaymentRepository


@dataclass(slots=True)
class PaymentRepositories:
    """Repositories reachable inside one unit of work."""

    payments: PaymentRepository


@runtime_checkable
class PaymentUnitOfWork(Protocol):
    """One store transaction; leaving the block without ``commit`` discards its writes."""

    @property
    def repositories(self) -> PaymentRepositories: ...

    def __enter__(self) -> PaymentUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool | None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


# Each store write runs in its own unit of work, so callers pass a factory.
type PaymentUnitOfWorkFactory = Callable[[], PaymentUnitOfWork]
