"""Header discovery and header-to-field resolution for ledger tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .values import cell_text

if TYPE_CHECKING:
    from collections.abc import Sequence

HEADER_SCAN_ROWS: Final[int] = 15

UID_LABELS: Final[tuple[str, ...]] = ("uid", "id транзакции", "transaction id", "id транз")

# Tried needle by needle, so an earlier needle wins over column order. A column
# claimed by an earlier field is never reused.
FIELD_LABELS: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    ("status", ("статус", "status")),
    ("type", ("тип транзакции", "тип операции", "тип", "type", "операция")),
    ("amount", ("сумма", "amount")),
    ("currency", ("валют", "currency")),
    ("date", ("дата оплаты", "paid_at", "дата платежа", "дата", "date", "время", "created_at")),
    ("email", ("email", "e-mail", "почт")),
    ("card", ("номер карты", "карт", "card", "pan")),
    ("brand", ("бренд", "brand", "платежная система", "платёжная система")),
    ("message", ("сообщение", "message", "причина")),
    ("description", ("описание", "description", "назначение")),
)

# Fee columns never carry a semantic field.
IGNORED_FRAGMENTS: Final[tuple[str, ...]] = ("комисс", "commission")


def normalize_label(value: object) -> str:
    return " ".join(cell_text(value).split()).lower()


def is_uid_label(label: str) -> bool:
    """Exact or prefix match against the known identifier labels."""

    return any(label == known or label.startswith(known) for known in UID_LABELS)


@dataclass(frozen=True, slots=True)
class ColumnMap:
    """Resolved column indexes for one table; ``None`` marks an absent field."""

    uid: int
    status: int | None = None
    type: int | None = None
    amount: int | None = None
    currency: int | None = None
    date: int | None = None
    email: int | None = None
    card: int | None = None
    brand: int | None = None
    message: int | None = None
    description: int | None = None

    def cell(self, row: Sequence[object], field: str) -> object:
        index: int | None = getattr(self, field)
        if index is None or index >= len(row):
            return None
        return row[index]


def resolve_columns(header: Sequence[object]) -> ColumnMap | None:
    """Map a header row onto semantic fields, or ``None`` without a UID column."""

    labels = [normalize_label(value) for value in header]
    uid_index = next((i for i, label in enumerate(labels) if label and is_uid_label(label)), None)
    if uid_index is None:
        return None

    claimed = {uid_index}
    claimed.update(
        i for i, label in enumerate(labels) if any(part in label for part in IGNORED_FRAGMENTS)
    )
    resolved: dict[str, int] = {}
    for field, needles in FIELD_LABELS:
        index = _first_match(labels, needles, claimed)
        if index is not None:
            resolved[field] = index
            claimed.add(index)
    return ColumnMap(uid=uid_index, **resolved)


def _first_match(labels: Sequence[str], needles: Sequence[str], claimed: set[int]) -> int | None:
    for needle in needles:
        for index, label in enumerate(labels):
            if index not in claimed and label and needle in label:
                return index
    return None


def find_header(rows: Sequence[Sequence[object]]) -> tuple[int, ColumnMap] | None:
    """Locate the header within the first rows; returns its offset and column map."""

    for offset, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        columns = resolve_columns(row)
        if columns is not None:
            return offset, columns
    return None


__all__ = [
    "FIELD_LABELS",
    "HEADER_SCAN_ROWS",
    "IGNORED_FRAGMENTS",
    "UID_LABELS",
    "ColumnMap",
    "find_header",
    "is_uid_label",
    "normalize_label",
    "resolve_columns",
]
