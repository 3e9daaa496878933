"""Map provider, localized and legacy payment vocabulary onto the canonical taxonomy.

Resolution order for a status (first match wins):

1. transaction type names a refund -> ``refunded``
2. transaction type names a cancel/void -> ``canceled``
3. free-text message carries a failure indicator -> ``failed``
4. exact lookup of the status in the synonym table
5. substring fallback: success, refund, cancel, fail, pending
6. otherwise ``UNKNOWN``; callers must route it to manual review and never
   persist it
"""

from __future__ import annotations

import re
from enum import Enum
from logging import getLogger
from typing import TYPE_CHECKING, Final, Literal

from payrecon.domain.errors import UnknownStatusError
from payrecon.domain.model import CanonicalStatus, CanonicalTransaction, TransactionKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from payrecon.domain.model import LedgerTransaction

log = getLogger(__name__)


class Unresolved(Enum):
    """Transient marker for vocabulary outside the synonym table."""

    UNKNOWN = "unknown"


UNKNOWN: Final = Unresolved.UNKNOWN

type StatusOutcome = CanonicalStatus | Literal[Unresolved.UNKNOWN]

_SYNONYMS: Final[dict[CanonicalStatus, tuple[str, ...]]] = {
    CanonicalStatus.SUCCEEDED: (
        "succeeded",
        "successful",
        "success",
        "completed",
        "complete",
        "processed",
        "captured",
        "capture",
        "paid",
        "успешно",
        "успешный",
        "успешная",
        "успешная операция",
        "оплачен",
        "оплачено",
        "проведен",
        "проведена",
    ),
    CanonicalStatus.REFUNDED: (
        "refunded",
        "refund",
        "partially_refunded",
        "возврат",
        "возврат средств",
        "возвращен",
        "возвращено",
    ),
    CanonicalStatus.CANCELED: (
        "canceled",
        "cancelled",
        "cancel",
        "void",
        "voided",
        "authorization_void",
        "отмена",
        "отменен",
        "отменена",
        "отменено",
    ),
    CanonicalStatus.FAILED: (
        "failed",
        "failure",
        "fail",
        "declined",
        "rejected",
        "expired",
        "incomplete",
        "error",
        "неуспешный",
        "неуспешно",
        "неуспешная",
        "ошибка",
        "отклонен",
        "отклонена",
        "истек",
    ),
    CanonicalStatus.PENDING: (
        "pending",
        "processing",
        "in_progress",
        "waiting",
        "ожидание",
        "в обработке",
        "в процессе",
    ),
}

STATUS_SYNONYMS: Final[dict[str, CanonicalStatus]] = {
    alias: status for status, aliases in _SYNONYMS.items() for alias in aliases
}

_REFUND_TYPE = re.compile(r"refund|возврат")
_CANCEL_TYPE = re.compile(r"cancel|void|отмен")
_AUTHORIZATION_TYPE = re.compile(r"authori[sz]|авториз")
_FAILURE_MESSAGE = re.compile(
    r"declin|insufficient|reject|\berror\b|do not honou?r|отклон|недостаточно|ошибк|отказ"
)

# Order matters: success-like is tried before refund-like and so on.
_FALLBACKS: Final[tuple[tuple[re.Pattern[str], CanonicalStatus], ...]] = (
    (re.compile(r"(?<!не)успеш|(?<!un)success|succeed|(?<!in)complet|captur"), CanonicalStatus.SUCCEEDED),
    (re.compile(r"refund|возврат"), CanonicalStatus.REFUNDED),
    (re.compile(r"cancel|void|отмен"), CanonicalStatus.CANCELED),
    (re.compile(r"fail|declin|reject|error|expir|неуспеш|unsuccess|ошиб|отклон"), CanonicalStatus.FAILED),
    (re.compile(r"pend|process|wait|ожид|обработ"), CanonicalStatus.PENDING),
)


def normalize_vocabulary(value: str | None) -> str:
    """Lower-case, trim and collapse inner whitespace."""

    if not value:
        return ""
    return " ".join(value.split()).lower()


def is_refund_type(transaction_type: str | None) -> bool:
    return bool(_REFUND_TYPE.search(normalize_vocabulary(transaction_type)))


def is_cancel_type(transaction_type: str | None) -> bool:
    return bool(_CANCEL_TYPE.search(normalize_vocabulary(transaction_type)))


def classify_transaction_kind(transaction_type: str | None) -> TransactionKind:
    """Classify a raw type; blank types default to a plain payment."""

    if is_refund_type(transaction_type):
        return TransactionKind.REFUND
    if is_cancel_type(transaction_type):
        return TransactionKind.VOID
    if _AUTHORIZATION_TYPE.search(normalize_vocabulary(transaction_type)):
        return TransactionKind.AUTHORIZATION
    return TransactionKind.PAYMENT


def canonicalize_status(
    raw_status: str | None,
    transaction_type: str | None = None,
    message: str | None = None,
) -> StatusOutcome:
    if is_refund_type(transaction_type):
        return CanonicalStatus.REFUNDED
    if is_cancel_type(transaction_type):
        return CanonicalStatus.CANCELED
    if _FAILURE_MESSAGE.search(normalize_vocabulary(message)):
        return CanonicalStatus.FAILED

    status = normalize_vocabulary(raw_status)
    if not status:
        return UNKNOWN
    exact = STATUS_SYNONYMS.get(status)
    if exact is not None:
        return exact
    for pattern, canonical in _FALLBACKS:
        if pattern.search(status):
            return canonical
    return UNKNOWN


def is_canonical_status(value: object) -> bool:
    return isinstance(value, str) and value in CanonicalStatus.__members__.values()


def require_canonical_status(
    raw_status: str | None,
    context: str | None = None,
    *,
    transaction_type: str | None = None,
    message: str | None = None,
) -> CanonicalStatus:
    """Like ``canonicalize_status`` but raise instead of returning ``UNKNOWN``."""

    outcome = canonicalize_status(raw_status, transaction_type, message)
    if outcome is UNKNOWN:
        raise UnknownStatusError(raw_status, context=context)
    return outcome


def canonicalize_transaction(transaction: LedgerTransaction) -> CanonicalTransaction | None:
    outcome = canonicalize_status(
        transaction.raw_status, transaction.raw_type, transaction.message
    )
    if outcome is UNKNOWN:
        return None
    return CanonicalTransaction(
        source=transaction,
        status=outcome,
        kind=classify_transaction_kind(transaction.raw_type),
    )


def canonicalize_ledger(
    transactions: Iterable[LedgerTransaction],
) -> tuple[list[CanonicalTransaction], list[LedgerTransaction]]:
    """Split a ledger into canonical transactions and those needing manual review."""

    canonical: list[CanonicalTransaction] = []
    unresolved: list[LedgerTransaction] = []
    for transaction in transactions:
        result = canonicalize_transaction(transaction)
        if result is None:
            log.warning(
                "Unknown status %r (type %r) for %s; needs manual review, excluded from writes",
                transaction.raw_status,
                transaction.raw_type,
                transaction.uid,
            )
            unresolved.append(transaction)
            continue
        canonical.append(result)
    return canonical, unresolved


_CARD_BRANDS: Final[dict[str, str]] = {
    "master": "mastercard",
    "mc": "mastercard",
    "mastercard": "mastercard",
    "master card": "mastercard",
    "visa": "visa",
    "belkart": "belkart",
    "belcard": "belkart",
    "белкарт": "belkart",
    "maestro": "maestro",
    "mir": "mir",
    "мир": "mir",
}


def normalize_card_brand(brand: str | None) -> str | None:
    lowered = normalize_vocabulary(brand)
    if not lowered:
        return None
    return _CARD_BRANDS.get(lowered, lowered)


def normalize_last4(value: str | None) -> str | None:
    """Extract the last four digits of a (masked) card number."""

    if not value:
        return None
    digits = re.sub(r"\D", "", value)[-4:]
    return digits if len(digits) == 4 else None


__all__ = [
    "STATUS_SYNONYMS",
    "UNKNOWN",
    "StatusOutcome",
    "Unresolved",
    "canonicalize_ledger",
    "canonicalize_status",
    "canonicalize_transaction",
    "classify_transaction_kind",
    "is_canonical_status",
    "is_cancel_type",
    "is_refund_type",
    "normalize_card_brand",
    "normalize_last4",
    "normalize_vocabulary",
    "require_canonical_status",
]
