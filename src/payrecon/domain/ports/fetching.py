"""Ports for reading the payment provider's ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from payrecon.domain.model import LedgerTransaction
    from payrecon.domain.periods import Period


@dataclass(slots=True)
class ListedLedger:
    """Every transaction the provider lists for a period, in listing order.

    ``truncated`` is set when the page limit stopped the listing before the
    provider returned a short page.
    """

    transactions: list[LedgerTransaction] = field(default_factory=list)
    pages: int = 0
    truncated: bool = False


@runtime_checkable
class LedgerProvider(Protocol):
    """Bulk listing and per-UID lookup against the payment provider.

    ``list_transactions`` raises ``ProviderUnavailableError`` when the provider
    refuses bulk listing for capability or scope reasons and ``ProviderError``
    on any other failure. ``get_transaction`` returns ``None`` when the
    provider has no record of the UID.
    """

    def list_transactions(self, period: Period) -> ListedLedger: ...

    def get_transaction(self, uid: str) -> LedgerTransaction | None: ...


__all__ = ["LedgerProvider", "ListedLedger"]
