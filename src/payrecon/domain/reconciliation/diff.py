"""Record matcher: joins canonical ledger transactions to the store by UID."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Final

from payrecon.domain.model import DiffKind, MismatchType

from .contracts import DiffEntry, FieldDelta, ReconciliationDiff, StoreSnapshot

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from payrecon.domain.model import CanonicalTransaction, PaymentRecord

AMOUNT_TOLERANCE: Final[Decimal] = Decimal("0.01")


def compare_fields(
    transaction: CanonicalTransaction,
    record: PaymentRecord,
) -> tuple[MismatchType | None, tuple[FieldDelta, ...]]:
    """Return the mismatch category and deltas; ``(None, ())`` when they agree.

    Amounts are compared by magnitude within ``AMOUNT_TOLERANCE``; a currency
    difference counts as an amount mismatch.
    """

    categories: list[MismatchType] = []
    deltas: list[FieldDelta] = []

    if record.canonical_status != transaction.status:
        categories.append(MismatchType.STATUS)
        deltas.append(
            FieldDelta(field="canonical_status", store=record.canonical_status, ledger=transaction.status)
        )

    amount_differs = abs(abs(record.amount) - abs(transaction.amount)) > AMOUNT_TOLERANCE
    currency_differs = record.currency.upper() != transaction.currency.upper()
    if amount_differs or currency_differs:
        categories.append(MismatchType.AMOUNT)
        if amount_differs:
            deltas.append(FieldDelta(field="amount", store=record.amount, ledger=transaction.amount))
        if currency_differs:
            deltas.append(
                FieldDelta(field="currency", store=record.currency, ledger=transaction.currency)
            )

    if record.transaction_type != transaction.kind:
        categories.append(MismatchType.TYPE)
        deltas.append(
            FieldDelta(field="transaction_type", store=record.transaction_type, ledger=transaction.kind)
        )

    if not categories:
        return None, ()
    mismatch = categories[0] if len(categories) == 1 else MismatchType.MULTIPLE
    return mismatch, tuple(deltas)


def compute_diff(
    ledger: Sequence[CanonicalTransaction],
    snapshot: StoreSnapshot,
    *,
    exclude_from_extra: Collection[str] = (),
) -> ReconciliationDiff:
    """Classify every UID into exactly one of the four diff sets.

    Ledger-side entries keep ledger order, extra entries keep snapshot order.
    ``exclude_from_extra`` names store UIDs that were never checked against
    the provider (or carry an unresolved status) and therefore are not drift.
    """

    index: dict[str, PaymentRecord] = {}
    for record in (*snapshot.period_records, *snapshot.linked_records):
        index.setdefault(record.uid, record)

    diff = ReconciliationDiff()
    ledger_uids: set[str] = set()
    for transaction in ledger:
        if transaction.uid in ledger_uids:
            continue
        ledger_uids.add(transaction.uid)
        diff.ledger_rollup.add(transaction.status, transaction.amount)

        record = index.get(transaction.uid)
        if record is None:
            diff.missing_in_store.append(
                DiffEntry(uid=transaction.uid, kind=DiffKind.MISSING_IN_STORE, ledger=transaction)
            )
            continue

        mismatch, deltas = compare_fields(transaction, record)
        if mismatch is None:
            diff.matched.append(
                DiffEntry(uid=transaction.uid, kind=DiffKind.MATCHED, ledger=transaction, record=record)
            )
        else:
            diff.mismatched.append(
                DiffEntry(
                    uid=transaction.uid,
                    kind=DiffKind.MISMATCHED,
                    ledger=transaction,
                    record=record,
                    mismatch_type=mismatch,
                    deltas=deltas,
                )
            )

    excluded = set(exclude_from_extra)
    seen_store: set[str] = set()
    for record in snapshot.period_records:
        if record.uid in seen_store:
            continue
        seen_store.add(record.uid)
        diff.store_rollup.add(record.canonical_status, record.amount)
        if record.uid in ledger_uids or record.uid in excluded:
            continue
        diff.extra_in_store.append(
            DiffEntry(uid=record.uid, kind=DiffKind.EXTRA_IN_STORE, record=record)
        )
    return diff


__all__ = ["AMOUNT_TOLERANCE", "compare_fields", "compute_diff"]
