"""Ledger ingestion entry point."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from payrecon.domain.errors import FatalIngestionError

from .readers import read_delimited, read_workbook

if TYPE_CHECKING:
    from pathlib import Path

    from payrecon.config import ReconcileSettings
    from payrecon.domain.model import LedgerTransaction

    from .readers import TableRead

log = getLogger(__name__)


class LedgerFormat(StrEnum):
    DELIMITED = "delimited"
    TABULAR = "tabular"

    @classmethod
    def from_path(cls, path: Path) -> LedgerFormat:
        suffix = path.suffix.lower()
        if suffix in {".xlsx", ".xlsm"}:
            return cls.TABULAR
        if suffix in {".csv", ".txt", ".tsv", ""}:
            return cls.DELIMITED
        raise FatalIngestionError(f"Unsupported ledger file type: {path.name}")


@dataclass(slots=True)
class IngestionResult:
    """Ordered, de-duplicated ledger transactions plus what was dropped."""

    transactions: list[LedgerTransaction] = field(default_factory=list)
    sheets_processed: list[str] = field(default_factory=list)
    skipped_sheets: int = 0
    skipped_rows: int = 0
    duplicate_rows: int = 0

    @property
    def uids(self) -> list[str]:
        return [transaction.uid for transaction in self.transactions]


def _collect(tables: list[TableRead], *, total_sheets: int) -> IngestionResult:
    result = IngestionResult(skipped_sheets=max(total_sheets - len(tables), 0))
    seen: set[str] = set()
    for table in tables:
        result.sheets_processed.append(table.name)
        result.skipped_rows += table.skipped_rows
        for transaction in table.transactions:
            if transaction.uid in seen:
                result.duplicate_rows += 1
                continue
            seen.add(transaction.uid)
            result.transactions.append(transaction)
        log.info(
            "Sheet %r: header at row %d, %d transactions, %d rows skipped",
            table.name,
            table.header_row + 1,
            len(table.transactions),
            table.skipped_rows,
        )
    if result.duplicate_rows:
        log.debug("Dropped %d rows repeating an earlier UID", result.duplicate_rows)
    return result


def ingest_ledger(
    raw: bytes,
    ledger_format: LedgerFormat,
    settings: ReconcileSettings,
) -> IngestionResult:
    """Parse a raw ledger export.

    Raises ``FatalIngestionError`` only when the input cannot be read at all;
    unrecognised sheets and rows without a valid UID are skipped.
    """

    reader = read_workbook if ledger_format is LedgerFormat.TABULAR else read_delimited
    tables, total = reader(raw, settings)
    return _collect(tables, total_sheets=total)


def ingest_ledger_file(path: Path, settings: ReconcileSettings) -> IngestionResult:
    ledger_format = LedgerFormat.from_path(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise FatalIngestionError(f"Cannot read ledger file {path}: {exc}") from exc
    return ingest_ledger(raw, ledger_format, settings)


__all__ = ["IngestionResult", "LedgerFormat", "ingest_ledger", "ingest_ledger_file"]
