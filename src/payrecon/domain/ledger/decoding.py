"""Text recovery for delimited ledger exports."""

from __future__ import annotations

import codecs
import re
from logging import getLogger
from typing import Final

from .columns import HEADER_SCAN_ROWS, is_uid_label, normalize_label

log = getLogger(__name__)

PRIMARY_ENCODING: Final[str] = "utf-8-sig"
LEGACY_ENCODING: Final[str] = "cp1251"
REPLACEMENT_CHAR: Final[str] = "�"

_EXPECTED_SCRIPT = re.compile(r"[Ѐ-ӿ]")
_CELL_SPLIT = re.compile(r"[;,]")


def decode_ledger_bytes(raw: bytes) -> str:
    """Decode a ledger export, falling back to the legacy single-byte encoding.

    Exports are UTF-8 (with or without BOM) or Windows-1251. When the UTF-8
    result carries replacement characters or no Cyrillic at all, the cp1251
    decoding is used instead unless it is even more damaged.
    """

    text = raw.decode(PRIMARY_ENCODING, errors="replace")
    if REPLACEMENT_CHAR not in text and (
        _EXPECTED_SCRIPT.search(text) or raw.startswith(codecs.BOM_UTF8)
    ):
        return text

    legacy = raw.decode(LEGACY_ENCODING, errors="replace")
    if legacy.count(REPLACEMENT_CHAR) > text.count(REPLACEMENT_CHAR):
        return text
    if legacy != text:
        log.debug("Ledger text re-decoded as %s", LEGACY_ENCODING)
    return legacy


def detect_delimiter(text: str) -> str:
    """Pick ``;`` or ``,`` by counting them (outside quotes) in the header line.

    The header line is the first of the leading lines naming an identifier
    column, so report titles above it do not decide the delimiter. Without
    one the first non-blank line is used.
    """

    lines = [line for line in text.splitlines()[:HEADER_SCAN_ROWS] if line.strip()]
    header = next((line for line in lines if _names_identifier(line)), lines[0] if lines else "")
    counts = {";": 0, ",": 0}
    in_quotes = False
    for char in header:
        if char == '"':
            in_quotes = not in_quotes
        elif not in_quotes and char in counts:
            counts[char] += 1
    return "," if counts[","] > counts[";"] else ";"


def _names_identifier(line: str) -> bool:
    cells = (normalize_label(part.strip('"')) for part in _CELL_SPLIT.split(line))
    return any(is_uid_label(cell) for cell in cells)


__all__ = ["LEGACY_ENCODING", "PRIMARY_ENCODING", "decode_ledger_bytes", "detect_delimiter"]
