"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class CanonicalStatus(StrEnum):
    """The only status values ever written to the payment store."""

    SUCCEEDED = "succeeded"
    REFUNDED = "refunded"
    CANCELED = "canceled"
    FAILED = "failed"
    PENDING = "pending"


class TransactionKind(StrEnum):
    """Normalised transaction type compared by the matcher."""

    PAYMENT = "payment"
    REFUND = "refund"
    VOID = "void"
    AUTHORIZATION = "authorization"

    @property
    def is_reversal(self) -> bool:
        return self in {TransactionKind.REFUND, TransactionKind.VOID}


class DiffKind(StrEnum):
    MATCHED = "matched"
    MISSING_IN_STORE = "missing_in_store"
    EXTRA_IN_STORE = "extra_in_store"
    MISMATCHED = "mismatched"


class MismatchType(StrEnum):
    STATUS = "status"
    AMOUNT = "amount"
    TYPE = "type"
    MULTIPLE = "multiple"


class FetchMode(StrEnum):
    """Where the ledger side of a run actually came from."""

    FILE = "file"
    LIST = "list"
    UID_VERIFY = "uid_verify"


class RequestedMode(StrEnum):
    """Fetch strategy requested by the caller for provider-driven runs."""

    LIST = "list"
    UID_VERIFY = "uid_verify"
    AUTO = "auto"


class ActionType(StrEnum):
    INSERT = "insert"
    UPDATE = "update"
