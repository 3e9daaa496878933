"""Projection of a finished run into a summary and a flat export."""

from __future__ import annotations

import csv
from typing import TYPE_CHECKING, Final

from payrecon.domain.model import ActionType, DiffKind

from .contracts import FallbackFetch, FileFetch, ListFetch, UidVerifyFetch

if TYPE_CHECKING:
    from collections.abc import Iterator
    from decimal import Decimal
    from typing import TextIO

    from .contracts import DiffEntry, LedgerFetch, ReconciliationRun, StatusRollup

NOTHING_TO_RECONCILE: Final[str] = "nothing to reconcile"

EXPORT_COLUMNS: Final[tuple[str, ...]] = (
    "uid",
    "classification",
    "mismatch_type",
    "ledger_status",
    "store_status",
    "ledger_type",
    "store_type",
    "ledger_amount",
    "store_amount",
    "currency",
    "action",
    "outcome",
)


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def _text(value: object) -> str:
    return "" if value is None else str(value)


def _entry_currency(entry: DiffEntry) -> str:
    if entry.ledger is not None:
        return entry.ledger.currency
    return entry.record.currency if entry.record is not None else ""


def _entry_sample(entry: DiffEntry) -> dict[str, object]:
    sample: dict[str, object] = {
        "uid": entry.uid,
        "amount": _money(entry.amount),
        "ledger_status": _text(entry.ledger.status if entry.ledger else None),
        "store_status": _text(entry.record.canonical_status if entry.record else None),
        "currency": _entry_currency(entry),
    }
    if entry.mismatch_type is not None:
        sample["mismatch_type"] = str(entry.mismatch_type)
        sample["deltas"] = [
            {"field": delta.field, "store": _text(delta.store), "ledger": _text(delta.ledger)}
            for delta in entry.deltas
        ]
    return sample


def _rollup(rollup: StatusRollup) -> dict[str, object]:
    return {
        "by_status": {
            str(status): {"count": rollup.counts[status], "amount": _money(rollup.amounts[status])}
            for status in rollup.counts
        },
        "net_revenue": _money(rollup.net_revenue),
    }


def _source(fetch: LedgerFetch | None) -> dict[str, object]:
    match fetch:
        case FileFetch(sheets=sheets, skipped_rows=skipped, outside_period=outside):
            return {"sheets": sheets, "skipped_rows": skipped, "outside_period": outside}
        case ListFetch(pages=pages, transactions=transactions, truncated=truncated):
            return {"pages": pages, "listed": len(transactions), "truncated": truncated}
        case (UidVerifyFetch() as verified) | FallbackFetch(result=verified):
            return {
                "checked": verified.checked,
                "verified": len(verified.transactions),
                "unverifiable": list(verified.unverifiable),
                "unchecked": len(verified.unchecked),
            }
        case None:
            return {}


def _applied(run: ReconciliationRun) -> dict[str, dict[str, int]] | None:
    if run.applied is None:
        return None
    return {
        str(ActionType.INSERT): {
            "succeeded": run.applied.inserted,
            "failed": run.applied.error_count(ActionType.INSERT),
        },
        str(ActionType.UPDATE): {
            "succeeded": run.applied.updated,
            "failed": run.applied.error_count(ActionType.UPDATE),
        },
    }


def summarize(run: ReconciliationRun, *, sample_limit: int = 50) -> dict[str, object]:
    """Structured, JSON-ready summary: counts, sums, bounded samples and errors."""

    diff = run.diff
    summary: dict[str, object] = {
        "run_id": str(run.run_id),
        "period": run.period.as_dict(),
        "dry_run": run.dry_run,
        "requested_mode": _text(run.requested_mode) or None,
        "mode_used": _text(run.mode_used) or None,
        "fallback_reason": run.fallback_reason,
        "started_at": run.started_at.isoformat(),
        "finished_at": run.finished_at.isoformat() if run.finished_at else None,
        "runtime_seconds": run.runtime_seconds,
        "ok": run.ok,
        "source": _source(run.fetch),
    }
    if diff is None:
        summary["message"] = "run did not complete"
        return summary

    totals = diff.totals()
    planned = {str(action): 0 for action in ActionType}
    for action in run.actions:
        planned[str(action.action)] += 1

    summary.update(
        {
            "message": (
                NOTHING_TO_RECONCILE
                if not diff.has_discrepancies and not run.unresolved
                else "discrepancies found"
            ),
            "counts": {str(kind): totals[kind].count for kind in DiffKind},
            "sums": {str(kind): _money(totals[kind].amount) for kind in DiffKind},
            "ledger_totals": _rollup(diff.ledger_rollup),
            "store_totals": _rollup(diff.store_rollup),
            "planned_actions": planned,
            "applied": _applied(run),
            "samples": {
                str(kind): [_entry_sample(entry) for entry in diff.entries(kind)[:sample_limit]]
                for kind in (DiffKind.MISSING_IN_STORE, DiffKind.EXTRA_IN_STORE, DiffKind.MISMATCHED)
            },
            "unresolved": [
                {"uid": item.uid, "raw_status": item.raw_status, "raw_type": item.raw_type}
                for item in run.unresolved
            ],
            "errors": [
                {"uid": error.uid, "action": _text(error.action) or None, "message": error.message}
                for error in run.errors
            ],
        }
    )
    return summary


def _outcomes(run: ReconciliationRun) -> dict[str, str]:
    if run.applied is None:
        return {action.uid: "planned" for action in run.actions}
    failed = {error.uid: f"failed: {error.message}" for error in run.applied.errors}
    return {action.uid: failed.get(action.uid, "applied") for action in run.actions}


def export_rows(run: ReconciliationRun) -> Iterator[list[str]]:
    """One line per diff entry, then unresolved and unverifiable UIDs."""

    yield list(EXPORT_COLUMNS)
    if run.diff is None:
        return

    actions = {action.uid: str(action.action) for action in run.actions}
    outcomes = _outcomes(run)
    for kind in DiffKind:
        for entry in run.diff.entries(kind):
            ledger, record = entry.ledger, entry.record
            yield [
                entry.uid,
                str(kind),
                _text(entry.mismatch_type),
                _text(ledger.status if ledger else None),
                _text(record.canonical_status if record else None),
                _text(ledger.kind if ledger else None),
                _text(record.transaction_type if record else None),
                _money(ledger.amount) if ledger else "",
                _money(record.amount) if record else "",
                _entry_currency(entry),
                actions.get(entry.uid, ""),
                outcomes.get(entry.uid, ""),
            ]

    for item in run.unresolved:
        yield [
            item.uid,
            "unresolved",
            "",
            item.raw_status,
            "",
            item.raw_type,
            "",
            _money(item.amount),
            "",
            item.currency,
            "",
            "manual review",
        ]

    match run.fetch:
        case (UidVerifyFetch() as verified) | FallbackFetch(result=verified):
            for uid in verified.unverifiable:
                yield [uid, "unverifiable", *([""] * (len(EXPORT_COLUMNS) - 3)), "no action"]
        case _:
            pass


def write_export(run: ReconciliationRun, stream: TextIO) -> int:
    """Write the flat export as CSV; returns the number of data lines."""

    writer = csv.writer(stream)
    count = -1
    for row in export_rows(run):
        writer.writerow(row)
        count += 1
    return count


__all__ = ["EXPORT_COLUMNS", "NOTHING_TO_RECONCILE", "export_rows", "summarize", "write_export"]
