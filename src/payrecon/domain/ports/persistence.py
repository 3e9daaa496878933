"""Ports for the internal payment store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from payrecon.domain.model import PaymentRecord, PaymentUpdate
    from payrecon.domain.periods import Period


@runtime_checkable
class PaymentRepository(Protocol):
    """Persistence contract for payment records keyed by provider UID."""

    def query_period(self, period: Period) -> list[PaymentRecord]:
        """Records whose payment timestamp falls inside ``period``, oldest first."""
        ...

    def find_by_uids(self, uids: Iterable[str]) -> list[PaymentRecord]: ...

    def insert(self, record: PaymentRecord) -> None: ...

    def update(self, uid: str, fields: PaymentUpdate) -> PaymentRecord:
        """Overwrite fields of an existing record; raises ``RecordWriteError`` when absent."""
        ...


__all__ = ["PaymentRepository"]
