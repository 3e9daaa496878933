"""Action derivation: which store writes a diff calls for.

``missing_in_store`` becomes an insert and ``mismatched`` an update. Matched
and extra entries produce nothing; extra records are left for human review
and never deleted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from payrecon.domain.model import PaymentRecord, PaymentUpdate

from .contracts import InsertAction, UpdateAction

if TYPE_CHECKING:
    from payrecon.domain.model import CanonicalTransaction

    from .contracts import PlannedAction, ReconciliationDiff


def record_from_ledger(transaction: CanonicalTransaction, *, origin: str) -> PaymentRecord:
    source = transaction.source
    return PaymentRecord(
        uid=transaction.uid,
        canonical_status=transaction.status,
        transaction_type=transaction.kind,
        amount=transaction.amount,
        currency=transaction.currency,
        paid_at=source.paid_at,
        customer_email=source.customer_email,
        card_brand=source.card_brand,
        card_last4=source.card_last4,
        description=source.description,
        origin=origin,
    )


def update_from_ledger(transaction: CanonicalTransaction) -> PaymentUpdate:
    """Overwrite status, type, amount, currency and any card details the ledger has."""

    return PaymentUpdate(
        canonical_status=transaction.status,
        transaction_type=transaction.kind,
        amount=transaction.amount,
        currency=transaction.currency,
        card_brand=transaction.source.card_brand,
        card_last4=transaction.source.card_last4,
    )


def derive_actions(diff: ReconciliationDiff, *, origin: str) -> list[PlannedAction]:
    actions: list[PlannedAction] = []
    for entry in diff.missing_in_store:
        if entry.ledger is not None:
            actions.append(
                InsertAction(uid=entry.uid, record=record_from_ledger(entry.ledger, origin=origin))
            )
    for entry in diff.mismatched:
        if entry.ledger is not None:
            actions.append(UpdateAction(uid=entry.uid, fields=update_from_ledger(entry.ledger)))
    return actions


__all__ = ["derive_actions", "record_from_ledger", "update_from_ledger"]
