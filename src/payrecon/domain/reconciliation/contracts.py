"""Shared reconciliation contract components.

This module holds only data shapes passed between stages:
- diff entries, field deltas and aggregate rollups
- planned actions (tagged by ``action``)
- ledger fetch outcomes (one class per fetch path)
- the run object threaded through a single invocation
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Literal

from payrecon.domain.model import ZERO, ActionType, CanonicalStatus, DiffKind, FetchMode

if TYPE_CHECKING:
    from payrecon.domain.model import (
        CanonicalTransaction,
        LedgerTransaction,
        MismatchType,
        PaymentRecord,
        PaymentUpdate,
        RequestedMode,
    )
    from payrecon.domain.periods import Period


@dataclass(slots=True, frozen=True, kw_only=True)
class FieldDelta:
    """One differing field: the store's current value and the ledger's value."""

    field: str
    store: object
    ledger: object


@dataclass(slots=True, frozen=True, kw_only=True)
class DiffEntry:
    uid: str
    kind: DiffKind
    ledger: CanonicalTransaction | None = None
    record: PaymentRecord | None = None
    mismatch_type: MismatchType | None = None
    deltas: tuple[FieldDelta, ...] = ()

    @property
    def amount(self) -> Decimal:
        """Absolute amount, preferring the ledger side."""

        if self.ledger is not None:
            return abs(self.ledger.amount)
        if self.record is not None:
            return abs(self.record.amount)
        return ZERO


@dataclass(slots=True, frozen=True)
class SetTotals:
    count: int = 0
    amount: Decimal = ZERO


@dataclass(slots=True, kw_only=True)
class StatusRollup:
    """Counts and absolute-amount sums per canonical status for one side."""

    counts: dict[CanonicalStatus, int] = field(
        default_factory=lambda: dict.fromkeys(CanonicalStatus, 0)
    )
    amounts: dict[CanonicalStatus, Decimal] = field(
        default_factory=lambda: dict.fromkeys(CanonicalStatus, ZERO)
    )

    def add(self, status: CanonicalStatus, amount: Decimal) -> None:
        self.counts[status] += 1
        self.amounts[status] += abs(amount)

    @property
    def net_revenue(self) -> Decimal:
        return (
            self.amounts[CanonicalStatus.SUCCEEDED]
            - self.amounts[CanonicalStatus.REFUNDED]
            - self.amounts[CanonicalStatus.CANCELED]
        )


@dataclass(slots=True, frozen=True, kw_only=True)
class StoreSnapshot:
    """Store records for a period plus out-of-period records sharing a ledger UID."""

    period_records: tuple[PaymentRecord, ...] = ()
    linked_records: tuple[PaymentRecord, ...] = ()

    @property
    def period_uids(self) -> list[str]:
        return [record.uid for record in self.period_records]


@dataclass(slots=True, kw_only=True)
class ReconciliationDiff:
    """Four disjoint, input-ordered sets plus side rollups."""

    matched: list[DiffEntry] = field(default_factory=list)
    missing_in_store: list[DiffEntry] = field(default_factory=list)
    extra_in_store: list[DiffEntry] = field(default_factory=list)
    mismatched: list[DiffEntry] = field(default_factory=list)
    ledger_rollup: StatusRollup = field(default_factory=StatusRollup)
    store_rollup: StatusRollup = field(default_factory=StatusRollup)

    def entries(self, kind: DiffKind) -> list[DiffEntry]:
        match kind:
            case DiffKind.MATCHED:
                return self.matched
            case DiffKind.MISSING_IN_STORE:
                return self.missing_in_store
            case DiffKind.EXTRA_IN_STORE:
                return self.extra_in_store
            case DiffKind.MISMATCHED:
                return self.mismatched

    def totals(self) -> dict[DiffKind, SetTotals]:
        return {
            kind: SetTotals(
                count=len(self.entries(kind)),
                amount=sum((entry.amount for entry in self.entries(kind)), ZERO),
            )
            for kind in DiffKind
        }

    @property
    def has_discrepancies(self) -> bool:
        return bool(self.missing_in_store or self.extra_in_store or self.mismatched)


@dataclass(slots=True, frozen=True, kw_only=True)
class InsertAction:
    uid: str
    record: PaymentRecord
    action: Literal[ActionType.INSERT] = ActionType.INSERT


@dataclass(slots=True, frozen=True, kw_only=True)
class UpdateAction:
    uid: str
    fields: PaymentUpdate
    action: Literal[ActionType.UPDATE] = ActionType.UPDATE


type PlannedAction = InsertAction | UpdateAction


@dataclass(slots=True, frozen=True, kw_only=True)
class RecordError:
    """A per-UID failure that did not abort the batch."""

    uid: str
    message: str
    action: ActionType | None = None


@dataclass(slots=True, kw_only=True)
class FileFetch:
    """Ledger read from an uploaded export."""

    transactions: list[LedgerTransaction]
    sheets: list[str] = field(default_factory=list)
    skipped_rows: int = 0
    outside_period: int = 0

    @property
    def mode_used(self) -> FetchMode:
        return FetchMode.FILE


@dataclass(slots=True, kw_only=True)
class ListFetch:
    """Ledger read by paging through the provider's listing."""

    transactions: list[LedgerTransaction]
    pages: int = 0
    truncated: bool = False

    @property
    def mode_used(self) -> FetchMode:
        return FetchMode.LIST


@dataclass(slots=True, kw_only=True)
class UidVerifyFetch:
    """Ledger assembled from per-UID lookups of store records.

    ``unverifiable`` UIDs are unknown to the provider; ``lookup_errors`` failed
    to be checked; ``unchecked`` fell beyond the lookup limit. None of them
    receive writes or count as extra.
    """

    transactions: list[LedgerTransaction]
    checked: int = 0
    unverifiable: list[str] = field(default_factory=list)
    lookup_errors: list[RecordError] = field(default_factory=list)
    unchecked: list[str] = field(default_factory=list)

    @property
    def mode_used(self) -> FetchMode:
        return FetchMode.UID_VERIFY

    @property
    def excluded_uids(self) -> set[str]:
        return {
            *self.unverifiable,
            *(error.uid for error in self.lookup_errors),
            *self.unchecked,
        }


@dataclass(slots=True, kw_only=True)
class FallbackFetch:
    """``auto`` mode after the provider refused bulk listing."""

    result: UidVerifyFetch
    fallback_reason: str

    @property
    def mode_used(self) -> FetchMode:
        return self.result.mode_used

    @property
    def transactions(self) -> list[LedgerTransaction]:
        return self.result.transactions


type LedgerFetch = FileFetch | ListFetch | UidVerifyFetch | FallbackFetch


@dataclass(slots=True, kw_only=True)
class ApplyResult:
    """Per-category outcome of executing planned actions."""

    inserted: int = 0
    updated: int = 0
    errors: list[RecordError] = field(default_factory=list)

    def record_success(self, action: ActionType) -> None:
        match action:
            case ActionType.INSERT:
                self.inserted += 1
            case ActionType.UPDATE:
                self.updated += 1

    def error_count(self, action: ActionType) -> int:
        return sum(1 for error in self.errors if error.action is action)


@dataclass(slots=True, kw_only=True)
class ReconciliationRun:
    """All state of one invocation; discarded after its report is produced."""

    period: Period
    dry_run: bool
    requested_mode: RequestedMode | None = None
    run_id: uuid.UUID = field(default_factory=uuid.uuid4)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None
    fetch: LedgerFetch | None = None
    diff: ReconciliationDiff | None = None
    actions: list[PlannedAction] = field(default_factory=list)
    applied: ApplyResult | None = None
    unresolved: list[LedgerTransaction] = field(default_factory=list)

    @property
    def mode_used(self) -> FetchMode | None:
        return self.fetch.mode_used if self.fetch is not None else None

    @property
    def fallback_reason(self) -> str | None:
        match self.fetch:
            case FallbackFetch(fallback_reason=reason):
                return reason
            case _:
                return None

    @property
    def errors(self) -> list[RecordError]:
        errors: list[RecordError] = []
        match self.fetch:
            case UidVerifyFetch(lookup_errors=lookup_errors) | FallbackFetch(
                result=UidVerifyFetch(lookup_errors=lookup_errors)
            ):
                errors.extend(lookup_errors)
            case _:
                pass
        if self.applied is not None:
            errors.extend(self.applied.errors)
        return errors

    @property
    def ok(self) -> bool:
        return self.finished_at is not None and not self.errors

    @property
    def runtime_seconds(self) -> float | None:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def finish(self) -> None:
        self.finished_at = datetime.now(UTC)


__all__ = [
    "ApplyResult",
    "DiffEntry",
    "FallbackFetch",
    "FieldDelta",
    "FileFetch",
    "InsertAction",
    "LedgerFetch",
    "ListFetch",
    "PlannedAction",
    "ReconciliationDiff",
    "ReconciliationRun",
    "RecordError",
    "SetTotals",
    "StatusRollup",
    "StoreSnapshot",
    "UidVerifyFetch",
    "UpdateAction",
]
