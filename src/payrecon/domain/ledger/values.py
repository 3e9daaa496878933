"""Cell-level parsers for ledger rows.

Every parser here is total: it returns a value or ``None``/zero and never
raises on malformed input, so a single bad cell cannot abort ingestion.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Final

from payrecon.domain.model import ZERO

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

UID_PATTERN: Final = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

_AMOUNT_NOISE = re.compile(r"[^\d.,-]")
_DECIMAL_COMMA = re.compile(r",\d{1,2}$")

_DATETIME_FORMATS: Final[tuple[str, ...]] = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y %H:%M",
    "%d.%m.%Y",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y",
)


def cell_text(value: object) -> str:
    """Render a raw cell as stripped text; empty cells become ``""``."""

    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def optional_text(value: object) -> str | None:
    text = cell_text(value)
    return text or None


def parse_uid(value: object) -> str | None:
    """Return the lower-cased UID when ``value`` has the strict 8-4-4-4-12 shape."""

    text = cell_text(value)
    if not UID_PATTERN.match(text):
        return None
    return text.lower()


def parse_amount(value: object) -> Decimal:
    """Parse localized amounts such as ``"1 234,56"``, ``"1,234.56"`` or ``99``.

    A comma followed by one or two trailing digits is a decimal separator;
    otherwise commas are thousands separators. Unparsable input yields zero.
    """

    if isinstance(value, bool) or value is None:
        return ZERO
    if isinstance(value, (int, float, Decimal)):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            return ZERO

    cleaned = _AMOUNT_NOISE.sub("", str(value))
    if _DECIMAL_COMMA.search(cleaned):
        cleaned = cleaned.replace(".", "").replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")
    if not cleaned:
        return ZERO
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return ZERO
    return amount if amount.is_finite() else ZERO


def parse_timestamp(value: object, tz: ZoneInfo) -> datetime | None:
    """Parse a ledger timestamp into UTC; naive values are read in ``tz``."""

    if value is None:
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    else:
        moment = _parse_timestamp_text(cell_text(value))
        if moment is None:
            return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz)
    return moment.astimezone(UTC)


def _parse_timestamp_text(text: str) -> datetime | None:
    if not text:
        return None
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)  # noqa: DTZ007
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def normalize_currency(value: object, default: str) -> str:
    text = cell_text(value).upper()
    return text if re.fullmatch(r"[A-Z]{3}", text) else default


def normalize_email(value: object) -> str | None:
    text = cell_text(value).lower()
    return text if "@" in text else None


__all__ = [
    "UID_PATTERN",
    "cell_text",
    "normalize_currency",
    "normalize_email",
    "optional_text",
    "parse_amount",
    "parse_timestamp",
    "parse_uid",
]
