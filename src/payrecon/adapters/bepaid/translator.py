"""Translate bePaid payloads into ledger transactions."""

from __future__ import annotations

from datetime import UTC
from decimal import Decimal
from logging import getLogger
from typing import TYPE_CHECKING, Final

from payrecon.domain.canonicalization import normalize_card_brand, normalize_last4
from payrecon.domain.ledger.values import normalize_currency, normalize_email, parse_uid
from payrecon.domain.model import LedgerTransaction

if TYPE_CHECKING:
    from datetime import datetime

    from payrecon.config import ReconcileSettings

    from .schema import TransactionPayload

log = getLogger(__name__)

MINOR_UNITS: Final[Decimal] = Decimal(100)


def _to_utc(value: datetime | None, settings: ReconcileSettings) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=settings.provider_tz)
    return value.astimezone(UTC)


def parse_transaction(
    payload: TransactionPayload,
    settings: ReconcileSettings,
) -> LedgerTransaction | None:
    """Build a ledger transaction; ``None`` when the UID is not in strict format.

    Gateway amounts are integers in minor units.
    """

    uid = parse_uid(payload.uid)
    if uid is None:
        log.debug("Dropping bePaid transaction with non-standard uid %r", payload.uid)
        return None

    card = payload.credit_card
    return LedgerTransaction(
        uid=uid,
        raw_status=payload.status or "",
        raw_type=payload.type or "payment",
        amount=payload.amount / MINOR_UNITS,
        currency=normalize_currency(payload.currency, settings.default_currency),
        paid_at=_to_utc(payload.paid_at or payload.created_at, settings),
        customer_email=normalize_email(payload.customer.email if payload.customer else None),
        card_brand=normalize_card_brand(card.brand if card else None),
        card_last4=normalize_last4(card.last_4 if card else None),
        message=payload.message,
        description=payload.description,
    )


__all__ = ["parse_transaction"]
