from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from payrecon.domain.canonicalization import canonicalize_ledger
from payrecon.domain.model import CanonicalStatus, DiffKind, MismatchType, TransactionKind
from payrecon.domain.reconciliation import StoreSnapshot, compute_diff, derive_actions
from payrecon.domain.reconciliation.contracts import InsertAction, UpdateAction
from payrecon.domain.reconciliation.diff import compare_fields
from tests.helpers.payments import make_record, make_transaction, make_uid

if TYPE_CHECKING:
    from payrecon.domain.model import CanonicalTransaction, LedgerTransaction


def _canonical(*transactions: LedgerTransaction) -> list[CanonicalTransaction]:
    canonical, unresolved = canonicalize_ledger(transactions)
    assert unresolved == []
    return canonical


def test_four_disjoint_sets() -> None:
    ledger = _canonical(
        make_transaction(make_uid(1)),
        make_transaction(make_uid(2)),
        make_transaction(make_uid(3), status="Ошибка"),
    )
    snapshot = StoreSnapshot(
        period_records=(
            make_record(make_uid(1)),
            make_record(make_uid(3)),
            make_record(make_uid(4)),
        )
    )

    diff = compute_diff(ledger, snapshot)

    assert [entry.uid for entry in diff.matched] == [make_uid(1)]
    assert [entry.uid for entry in diff.missing_in_store] == [make_uid(2)]
    assert [entry.uid for entry in diff.extra_in_store] == [make_uid(4)]
    assert [entry.uid for entry in diff.mismatched] == [make_uid(3)]
    assert diff.mismatched[0].mismatch_type is MismatchType.STATUS
    assert diff.has_discrepancies
    totals = diff.totals()
    assert totals[DiffKind.MISSING_IN_STORE].count == 1
    assert totals[DiffKind.MISSING_IN_STORE].amount == Decimal("100.00")


def test_diff_is_deterministic_and_input_ordered() -> None:
    uids = [make_uid(number) for number in (9, 3, 7, 1)]
    ledger = _canonical(*(make_transaction(uid) for uid in uids))
    snapshot = StoreSnapshot(
        period_records=(make_record(make_uid(20)), make_record(make_uid(5)), make_record(uids[2]))
    )

    first = compute_diff(ledger, snapshot)
    second = compute_diff(ledger, snapshot)

    assert first == second
    assert [entry.uid for entry in first.missing_in_store] == [uids[0], uids[1], uids[3]]
    assert [entry.uid for entry in first.extra_in_store] == [make_uid(20), make_uid(5)]


def test_amount_tolerance_and_reversal_sign() -> None:
    within = _canonical(make_transaction(make_uid(1), amount="100.01"))[0]
    beyond = _canonical(make_transaction(make_uid(1), amount="100.02"))[0]
    refund = _canonical(make_transaction(make_uid(2), transaction_type="Возврат", amount="40"))[0]

    assert compare_fields(within, make_record(make_uid(1))) == (None, ())
    mismatch, deltas = compare_fields(beyond, make_record(make_uid(1)))
    assert mismatch is MismatchType.AMOUNT
    assert [delta.field for delta in deltas] == ["amount"]

    stored_refund = make_record(
        make_uid(2),
        status=CanonicalStatus.REFUNDED,
        kind=TransactionKind.REFUND,
        amount="-40.00",
    )
    assert compare_fields(refund, stored_refund) == (None, ())


def test_currency_difference_is_an_amount_mismatch() -> None:
    transaction = _canonical(make_transaction(make_uid(1), currency="USD"))[0]

    mismatch, deltas = compare_fields(transaction, make_record(make_uid(1)))

    assert mismatch is MismatchType.AMOUNT
    assert deltas[0].field == "currency"
    assert (deltas[0].store, deltas[0].ledger) == ("BYN", "USD")


def test_several_differences_are_tagged_multiple() -> None:
    transaction = _canonical(
        make_transaction(make_uid(1), status="Ошибка", transaction_type="authorization")
    )[0]

    mismatch, deltas = compare_fields(transaction, make_record(make_uid(1)))

    assert mismatch is MismatchType.MULTIPLE
    assert {delta.field for delta in deltas} == {"canonical_status", "transaction_type"}


def test_linked_records_match_but_never_count_as_extra() -> None:
    outside = make_record(make_uid(1), paid_at=datetime(2024, 12, 30, tzinfo=UTC))
    ledger = _canonical(make_transaction(make_uid(1)))

    diff = compute_diff(ledger, StoreSnapshot(linked_records=(outside,)))

    assert [entry.uid for entry in diff.matched] == [make_uid(1)]
    assert diff.extra_in_store == []
    assert diff.store_rollup.counts[CanonicalStatus.SUCCEEDED] == 0


def test_excluded_store_uids_are_not_extra() -> None:
    snapshot = StoreSnapshot(period_records=(make_record(make_uid(1)), make_record(make_uid(2))))

    diff = compute_diff([], snapshot, exclude_from_extra={make_uid(2)})

    assert [entry.uid for entry in diff.extra_in_store] == [make_uid(1)]


def test_rollups_and_net_revenue() -> None:
    ledger = _canonical(
        make_transaction(make_uid(1), amount="100"),
        make_transaction(make_uid(2), amount="50"),
        make_transaction(make_uid(3), transaction_type="Возврат", amount="30"),
        make_transaction(make_uid(4), status="Отмена", amount="5"),
    )

    diff = compute_diff(ledger, StoreSnapshot())

    assert diff.ledger_rollup.counts[CanonicalStatus.SUCCEEDED] == 2
    assert diff.ledger_rollup.amounts[CanonicalStatus.REFUNDED] == Decimal(30)
    assert diff.ledger_rollup.net_revenue == Decimal(115)


def test_actions_insert_missing_and_update_mismatched_only() -> None:
    ledger = _canonical(
        make_transaction(make_uid(1), card_brand="visa", card_last4="4242"),
        make_transaction(make_uid(2), amount="120.00"),
        make_transaction(make_uid(3)),
    )
    snapshot = StoreSnapshot(
        period_records=(
            make_record(make_uid(2)),
            make_record(make_uid(3)),
            make_record(make_uid(4)),
        )
    )

    actions = derive_actions(compute_diff(ledger, snapshot), origin="reconcile:list")

    assert [(type(action), action.uid) for action in actions] == [
        (InsertAction, make_uid(1)),
        (UpdateAction, make_uid(2)),
    ]
    insert, update = actions
    assert isinstance(insert, InsertAction)
    assert insert.record.canonical_status is CanonicalStatus.SUCCEEDED
    assert insert.record.card_last4 == "4242"
    assert insert.record.origin == "reconcile:list"
    assert isinstance(update, UpdateAction)
    assert update.fields.amount == Decimal("120.00")
