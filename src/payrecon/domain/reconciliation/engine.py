"""Orchestrator for one reconciliation run.

The engine composes ingestion results or provider fetches with the store
snapshot, diff, plan and executor. Every run recomputes the diff from fresh
reads; no precomputed plan is ever accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from payrecon.domain.canonicalization import canonicalize_ledger
from payrecon.domain.model import RequestedMode

from .apply import apply_actions
from .contracts import (
    ApplyResult,
    FallbackFetch,
    FileFetch,
    ReconciliationRun,
    StoreSnapshot,
    UidVerifyFetch,
)
from .diff import compute_diff
from .fetch import fetch_ledger
from .plan import derive_actions

if TYPE_CHECKING:
    from collections.abc import Sequence

    from payrecon.config import ReconcileSettings
    from payrecon.domain.ledger import IngestionResult
    from payrecon.domain.periods import Period
    from payrecon.domain.ports import LedgerProvider, PaymentUnitOfWorkFactory

    from .contracts import LedgerFetch

log = getLogger(__name__)


@dataclass(slots=True)
class ReconciliationEngine:
    """Run reconciliation for one period against the payment store."""

    uow_factory: PaymentUnitOfWorkFactory
    settings: ReconcileSettings
    provider: LedgerProvider | None = None

    def reconcile_file(
        self,
        ingestion: IngestionResult,
        period: Period,
        *,
        dry_run: bool = True,
    ) -> ReconciliationRun:
        """Reconcile an ingested export; rows dated outside ``period`` are ignored."""

        run = ReconciliationRun(period=period, dry_run=dry_run)
        in_period = [
            transaction
            for transaction in ingestion.transactions
            if transaction.paid_at is None or period.contains(transaction.paid_at)
        ]
        fetch = FileFetch(
            transactions=in_period,
            sheets=list(ingestion.sheets_processed),
            skipped_rows=ingestion.skipped_rows,
            outside_period=len(ingestion.transactions) - len(in_period),
        )
        return self._reconcile(run, fetch)

    def reconcile_provider(
        self,
        period: Period,
        *,
        mode: RequestedMode = RequestedMode.AUTO,
        dry_run: bool = True,
    ) -> ReconciliationRun:
        if self.provider is None:
            raise ValueError("A ledger provider is required for provider-driven runs")

        run = ReconciliationRun(period=period, dry_run=dry_run, requested_mode=mode)
        fetch = fetch_ledger(
            self.provider,
            period,
            mode,
            store_uids=lambda: self.load_snapshot(period).period_uids,
            uid_verify_limit=self.settings.uid_verify_limit,
        )
        return self._reconcile(run, fetch)

    def load_snapshot(self, period: Period, ledger_uids: Sequence[str] = ()) -> StoreSnapshot:
        """Read period records plus any other records sharing a ledger UID."""

        with self.uow_factory() as uow:
            payments = uow.repositories.payments
            period_records = payments.query_period(period)
            known = {record.uid for record in period_records}
            outside = [uid for uid in ledger_uids if uid not in known]
            linked = payments.find_by_uids(outside) if outside else []
        return StoreSnapshot(period_records=tuple(period_records), linked_records=tuple(linked))

    def _reconcile(self, run: ReconciliationRun, fetch: LedgerFetch) -> ReconciliationRun:
        log.info(
            "Reconciliation %s started for %s..%s (%s, %s)",
            run.run_id,
            run.period.from_date,
            run.period.to_date,
            fetch.mode_used,
            "dry-run" if run.dry_run else "execute",
        )
        run.fetch = fetch
        canonical, run.unresolved = canonicalize_ledger(fetch.transactions)

        excluded = {transaction.uid for transaction in run.unresolved}
        match fetch:
            case (UidVerifyFetch() as verified) | FallbackFetch(result=verified):
                excluded |= verified.excluded_uids
            case _:
                pass

        snapshot = self.load_snapshot(run.period, [transaction.uid for transaction in canonical])
        run.diff = compute_diff(canonical, snapshot, exclude_from_extra=excluded)
        run.actions = derive_actions(run.diff, origin=f"reconcile:{fetch.mode_used}")

        if not run.dry_run:
            run.applied = (
                apply_actions(self.uow_factory, run.actions) if run.actions else ApplyResult()
            )

        run.finish()
        log.info(
            "Reconciliation %s finished: %d matched, %d missing, %d extra, %d mismatched, "
            "%d unresolved, %d errors",
            run.run_id,
            len(run.diff.matched),
            len(run.diff.missing_in_store),
            len(run.diff.extra_in_store),
            len(run.diff.mismatched),
            len(run.unresolved),
            len(run.errors),
        )
        return run


__all__ = ["ReconciliationEngine"]
