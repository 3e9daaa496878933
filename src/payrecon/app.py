"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from payrecon.adapters.bepaid import BepaidLedgerProvider
from payrecon.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyPaymentUnitOfWork,
    is_started,
    startup,
)
from payrecon.config import get_bepaid_config, get_reconcile_settings
from payrecon.domain.ledger import ingest_ledger_file
from payrecon.domain.model import RequestedMode
from payrecon.domain.periods import Period
from payrecon.domain.reconciliation import ReconciliationEngine, write_export

if TYPE_CHECKING:
    from datetime import date
    from pathlib import Path

    from payrecon.config import ReconcileSettings
    from payrecon.domain.ports import LedgerProvider, PaymentUnitOfWorkFactory
    from payrecon.domain.reconciliation import ReconciliationRun


log = getLogger(__name__)


def _resolve_unit_of_work(
    unit_of_work_factory: PaymentUnitOfWorkFactory | None,
) -> PaymentUnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyPaymentUnitOfWork


def reconcile_ledger_file(
    path: Path,
    *,
    from_date: date,
    to_date: date,
    dry_run: bool = True,
    settings: ReconcileSettings | None = None,
    unit_of_work_factory: PaymentUnitOfWorkFactory | None = None,
) -> ReconciliationRun:
    """Reconcile an uploaded ledger export (CSV or xlsx) against the store."""

    effective_settings = settings or get_reconcile_settings()
    period = Period(from_date, to_date, effective_settings.provider_tz)
    effective_uow = _resolve_unit_of_work(unit_of_work_factory)

    ingestion = ingest_ledger_file(path, effective_settings)
    log.info(
        "Ingested %s: %d transactions from %d sheet(s), %d rows skipped",
        path.name,
        len(ingestion.transactions),
        len(ingestion.sheets_processed),
        ingestion.skipped_rows,
    )

    engine = ReconciliationEngine(uow_factory=effective_uow, settings=effective_settings)
    return engine.reconcile_file(ingestion, period, dry_run=dry_run)


def reconcile_with_provider(
    *,
    from_date: date,
    to_date: date,
    mode: RequestedMode = RequestedMode.AUTO,
    dry_run: bool = True,
    provider: LedgerProvider | None = None,
    settings: ReconcileSettings | None = None,
    unit_of_work_factory: PaymentUnitOfWorkFactory | None = None,
) -> ReconciliationRun:
    """Reconcile the period against the live bePaid gateway."""

    effective_settings = settings or get_reconcile_settings()
    period = Period(from_date, to_date, effective_settings.provider_tz)
    effective_provider = provider or BepaidLedgerProvider(
        config=get_bepaid_config(),
        settings=effective_settings,
    )
    effective_uow = _resolve_unit_of_work(unit_of_work_factory)

    engine = ReconciliationEngine(
        uow_factory=effective_uow,
        settings=effective_settings,
        provider=effective_provider,
    )
    return engine.reconcile_provider(period, mode=mode, dry_run=dry_run)


def export_run(run: ReconciliationRun, path: Path) -> int:
    """Write the flat CSV export of ``run`` to ``path``; returns the line count."""

    with path.open("w", encoding="utf-8", newline="") as stream:
        count = write_export(run, stream)
    log.info("Wrote %d export lines to %s", count, path)
    return count


__all__ = ["export_run", "reconcile_ledger_file", "reconcile_with_provider"]
