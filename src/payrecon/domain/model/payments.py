"""Payment entities shared by ingestion, matching and persistence."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import CanonicalStatus, TransactionKind

ZERO = Decimal("0.00")


def signed_amount(amount: Decimal, kind: TransactionKind) -> Decimal:
    """Store convention: reversals (refund/void) carry a negative amount."""

    magnitude = abs(amount)
    return -magnitude if kind.is_reversal else magnitude


@dataclass(slots=True, frozen=True, kw_only=True)
class LedgerTransaction:
    """One provider-side transaction as read from a ledger export or the API."""

    uid: str
    raw_status: str
    raw_type: str
    amount: Decimal
    currency: str
    paid_at: datetime | None = None
    customer_email: str | None = None
    card_brand: str | None = None
    card_last4: str | None = None
    message: str | None = None
    description: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class CanonicalTransaction:
    """Ledger transaction paired with its canonical status and kind."""

    source: LedgerTransaction
    status: CanonicalStatus
    kind: TransactionKind

    @property
    def uid(self) -> str:
        return self.source.uid

    @property
    def amount(self) -> Decimal:
        return signed_amount(self.source.amount, self.kind)

    @property
    def currency(self) -> str:
        return self.source.currency


@dataclass(kw_only=True, eq=False)
class PaymentRecord:
    """Internally stored payment, keyed by the provider UID.

    Mapped imperatively by the SQLAlchemy adapter; kept as a plain dataclass so
    the matcher and tests can build snapshots without a database.
    """

    uid: str
    canonical_status: CanonicalStatus
    transaction_type: TransactionKind
    amount: Decimal
    currency: str
    paid_at: datetime | None = None
    customer_email: str | None = None
    card_brand: str | None = None
    card_last4: str | None = None
    description: str | None = None
    order_id: uuid.UUID | None = None
    customer_id: uuid.UUID | None = None
    origin: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class PaymentUpdate:
    """Field overwrite for an existing record; ``None`` leaves a field untouched."""

    canonical_status: CanonicalStatus | None = None
    transaction_type: TransactionKind | None = None
    amount: Decimal | None = None
    currency: str | None = None
    card_brand: str | None = None
    card_last4: str | None = None

    def changed_fields(self) -> dict[str, object]:
        candidates: dict[str, object | None] = {
            "canonical_status": self.canonical_status,
            "transaction_type": self.transaction_type,
            "amount": self.amount,
            "currency": self.currency,
            "card_brand": self.card_brand,
            "card_last4": self.card_last4,
        }
        return {name: value for name, value in candidates.items() if value is not None}

    def apply_to(self, record: PaymentRecord) -> None:
        for name, value in self.changed_fields().items():
            setattr(record, name, value)
        record.updated_at = datetime.now(UTC)
