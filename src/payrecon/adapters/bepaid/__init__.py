"""Public interface for the bePaid adapter."""

from __future__ import annotations

from .client import CAPABILITY_STATUSES, BepaidLedgerProvider
from .schema import TransactionListResponse, TransactionPayload, TransactionResponse
from .translator import parse_transaction

__all__ = [
    "CAPABILITY_STATUSES",
    "BepaidLedgerProvider",
    "TransactionListResponse",
    "TransactionPayload",
    "TransactionResponse",
    "parse_transaction",
]
