"""Readers turning delimited text and workbooks into typed ledger rows."""

from __future__ import annotations

import csv
import io
import zipfile
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from payrecon.domain.canonicalization import normalize_card_brand, normalize_last4
from payrecon.domain.errors import FatalIngestionError
from payrecon.domain.model import LedgerTransaction

from .columns import find_header
from .decoding import decode_ledger_bytes, detect_delimiter
from .values import (
    cell_text,
    normalize_currency,
    normalize_email,
    optional_text,
    parse_amount,
    parse_timestamp,
    parse_uid,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from payrecon.config import ReconcileSettings

    from .columns import ColumnMap

log = getLogger(__name__)

DEFAULT_TRANSACTION_TYPE: Final[str] = "Платеж"
DELIMITED_SHEET_NAME: Final[str] = "csv"


@dataclass(slots=True)
class TableRead:
    """Rows accepted from one sheet (or the single delimited table)."""

    name: str
    header_row: int
    transactions: list[LedgerTransaction] = field(default_factory=list)
    skipped_rows: int = 0


def _is_blank(row: Sequence[object]) -> bool:
    return all(not cell_text(value) for value in row)


def row_to_transaction(
    row: Sequence[object],
    columns: ColumnMap,
    settings: ReconcileSettings,
) -> LedgerTransaction | None:
    """Convert one raw row; ``None`` when its identifier is not a strict UID."""

    uid = parse_uid(columns.cell(row, "uid"))
    if uid is None:
        return None
    return LedgerTransaction(
        uid=uid,
        raw_status=cell_text(columns.cell(row, "status")),
        raw_type=cell_text(columns.cell(row, "type")) or DEFAULT_TRANSACTION_TYPE,
        amount=parse_amount(columns.cell(row, "amount")),
        currency=normalize_currency(columns.cell(row, "currency"), settings.default_currency),
        paid_at=parse_timestamp(columns.cell(row, "date"), settings.provider_tz),
        customer_email=normalize_email(columns.cell(row, "email")),
        card_brand=normalize_card_brand(optional_text(columns.cell(row, "brand"))),
        card_last4=normalize_last4(optional_text(columns.cell(row, "card"))),
        message=optional_text(columns.cell(row, "message")),
        description=optional_text(columns.cell(row, "description")),
    )


def read_table(
    name: str,
    rows: Sequence[Sequence[object]],
    settings: ReconcileSettings,
) -> TableRead | None:
    """Read a table whose header sits somewhere in its first rows.

    Returns ``None`` when no identifier column is found; rows without a
    strict UID are dropped and only counted.
    """

    located = find_header(rows)
    if located is None:
        return None
    offset, columns = located

    table = TableRead(name=name, header_row=offset)
    for row in rows[offset + 1 :]:
        if _is_blank(row):
            continue
        transaction = row_to_transaction(row, columns, settings)
        if transaction is None:
            table.skipped_rows += 1
            continue
        table.transactions.append(transaction)
    return table


def read_delimited(raw: bytes, settings: ReconcileSettings) -> tuple[list[TableRead], int]:
    """Read delimited text; returns the accepted table and the table count (0 or 1)."""

    text = decode_ledger_bytes(raw)
    delimiter = detect_delimiter(text)
    try:
        rows = list(csv.reader(io.StringIO(text, newline=""), delimiter=delimiter))
    except csv.Error as exc:
        raise FatalIngestionError(f"Unreadable delimited ledger: {exc}") from exc

    table = read_table(DELIMITED_SHEET_NAME, rows, settings)
    if table is None:
        log.debug("No identifier column in delimited ledger (delimiter %r)", delimiter)
        return [], 1 if rows else 0
    return [table], 1


_WORKBOOK_ERRORS = (zipfile.BadZipFile, InvalidFileException, KeyError, OSError, ValueError)


def _workbook_sheets(raw: bytes) -> list[tuple[str, list[tuple[object, ...]]]]:
    try:
        workbook = load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
    except _WORKBOOK_ERRORS as exc:
        raise FatalIngestionError(f"Unreadable workbook: {exc}") from exc
    try:
        return [
            (sheet.title, [tuple(row) for row in sheet.iter_rows(values_only=True)])
            for sheet in workbook.worksheets
        ]
    except _WORKBOOK_ERRORS as exc:
        raise FatalIngestionError(f"Corrupt workbook sheet: {exc}") from exc
    finally:
        workbook.close()


def read_workbook(raw: bytes, settings: ReconcileSettings) -> tuple[list[TableRead], int]:
    """Read every sheet; returns accepted tables and the number of sheets seen."""

    sheets = _workbook_sheets(raw)
    tables: list[TableRead] = []
    for title, rows in sheets:
        table = read_table(title, rows, settings)
        if table is None:
            log.debug("Skipping sheet %r: no identifier column", title)
            continue
        tables.append(table)
    return tables, len(sheets)


__all__ = [
    "DEFAULT_TRANSACTION_TYPE",
    "TableRead",
    "read_delimited",
    "read_table",
    "read_workbook",
    "row_to_transaction",
]
