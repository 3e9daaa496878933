"""Domain model exports."""

from __future__ import annotations

from .enums import (
    ActionType,
    CanonicalStatus,
    DiffKind,
    FetchMode,
    MismatchType,
    RequestedMode,
    TransactionKind,
)
from .payments import (
    ZERO,
    CanonicalTransaction,
    LedgerTransaction,
    PaymentRecord,
    PaymentUpdate,
    signed_amount,
)

__all__ = [
    "ZERO",
    "ActionType",
    "CanonicalStatus",
    "CanonicalTransaction",
    "DiffKind",
    "FetchMode",
    "LedgerTransaction",
    "MismatchType",
    "PaymentRecord",
    "PaymentUpdate",
    "RequestedMode",
    "TransactionKind",
    "signed_amount",
]
