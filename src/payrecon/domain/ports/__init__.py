"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import LedgerProvider, ListedLedger
from .persistence import PaymentRepository
from .unit_of_work import PaymentRepositories, PaymentUnitOfWork, PaymentUnitOfWorkFactory

__all__ = [
    "LedgerProvider",
    "ListedLedger",
    "PaymentRepositories",
    "PaymentRepository",
    "PaymentUnitOfWork",
    "PaymentUnitOfWorkFactory",
]
