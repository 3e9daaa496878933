"""Reconciliation core: diff the provider ledger against the payment store.

Layered flow for one run:
1) obtain ledger transactions (uploaded export, listing or per-UID lookups)
2) canonicalize statuses; unknown vocabulary is set aside for manual review
3) read the store snapshot for the period
4) diff into matched / missing / extra / mismatched
5) derive inserts and updates
6) apply them one record at a time (execute only)
7) project the run into a summary and a flat export
"""

from __future__ import annotations

from .contracts import (
    ApplyResult,
    DiffEntry,
    FallbackFetch,
    FieldDelta,
    FileFetch,
    InsertAction,
    LedgerFetch,
    ListFetch,
    PlannedAction,
    ReconciliationDiff,
    ReconciliationRun,
    RecordError,
    StatusRollup,
    StoreSnapshot,
    UidVerifyFetch,
    UpdateAction,
)
from .diff import compute_diff
from .engine import ReconciliationEngine
from .fetch import fetch_ledger
from .plan import derive_actions
from .report import export_rows, summarize, write_export

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
    "ReconciliationEngine",
    "ReconciliationRun",
    "RecordError",
    "StatusRollup",
    "StoreSnapshot",
    "UidVerifyFetch",
    "UpdateAction",
    "compute_diff",
    "derive_actions",
    "export_rows",
    "fetch_ledger",
    "summarize",
    "write_export",
]
