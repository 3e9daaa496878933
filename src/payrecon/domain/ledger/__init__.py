"""Ledger ingestion: raw exports into ordered ``LedgerTransaction`` rows."""

from __future__ import annotations

from .columns import ColumnMap, find_header, resolve_columns
from .decoding import decode_ledger_bytes, detect_delimiter
from .ingest import IngestionResult, LedgerFormat, ingest_ledger, ingest_ledger_file
from .values import parse_amount, parse_timestamp, parse_uid

__all__ = [
    "ColumnMap",
    "IngestionResult",
    "LedgerFormat",
    "decode_ledger_bytes",
    "detect_delimiter",
    "find_header",
    "ingest_ledger",
    "ingest_ledger_file",
    "parse_amount",
    "parse_timestamp",
    "parse_uid",
    "resolve_columns",
]
