"""
app/parsers/coercion.py

Total field coercion helpers for raw report cells.

Every function returns a safe default instead of raising, so callers must
check required fields for presence themselves: a 0 here can mean either
"zero" or "unparseable".
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date

_EDGE_QUOTE_PATTERN = re.compile(r"^[\"']|[\"']$")
_FLOAT_PREFIX_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX_PATTERN = re.compile(r"^[+-]?\d+")
_ISO_DATETIME_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ]")

_TRUE_VALUES = {"true", "yes", "1", "y"}


def clean_string(value: str | None) -> str:
    """
    Strip one surrounding quote character on each side, then whitespace.
    """

    if not value:
        return ""
    return _EDGE_QUOTE_PATTERN.sub("", value).strip()


def parse_date(value: str | None) -> str:
    """
    Normalize MM/DD/YY and MM/DD/YYYY to YYYY-MM-DD.

    Two-digit years land in the 2000s. ISO datetimes are cut to their date
    part. ISO dates and unknown formats are returned cleaned but otherwise
    unchanged.
    """

    if not value:
        return ""
    cleaned = clean_string(value)

    parts = cleaned.split("/")
    if len(parts) == 3:
        month, day, year = parts
        if len(year) == 2:
            year = f"20{year}"
        return f"{year}-{month.rjust(2, '0')}-{day.rjust(2, '0')}"

    match = _ISO_DATETIME_PATTERN.match(cleaned)
    if match is not None:
        return match.group(1)

    return cleaned


def is_iso_date(value: str) -> bool:
    """
    True when value is a real calendar date in YYYY-MM-DD form.
    """

    if len(value) != 10:
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _float_prefix(value: str) -> float:
    match = _FLOAT_PREFIX_PATTERN.match(value.strip())
    if match is None:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def parse_currency(value: str | None) -> float:
    """
    Parse "$1,234.56" style amounts.
    """

    if not value:
        return 0.0
    return _float_prefix(value.replace("$", "").replace(",", ""))


def parse_percentage(value: str | None) -> float:
    """
    Parse "12.34%" to 12.34. No scaling is applied.
    """

    if not value:
        return 0.0
    return _float_prefix(value.replace("%", "", 1))


def parse_int(value: str | None) -> int:
    """
    Parse the leading integer of a value, ignoring thousands separators.
    """

    if not value:
        return 0
    match = _INT_PREFIX_PATTERN.match(value.replace(",", "").strip())
    if match is None:
        return 0
    return int(match.group(0))


def parse_float(value: str | None) -> float:
    if not value:
        return 0.0
    return _float_prefix(value.replace(",", ""))


def parse_boolean(value: str | None) -> bool:
    if not value:
        return False
    return value.strip().lower() in _TRUE_VALUES


def split_csv_line(line: str) -> list[str]:
    """
    Split one comma-delimited line.

    A double quote toggles the in-field state and is dropped; escaped quotes
    inside quoted fields are not recognized.
    """

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


def split_tsv_line(line: str) -> list[str]:
    return [clean_string(value) for value in line.split("\t")]


def split_lines(content: str) -> list[str]:
    """
    Split file content into non-blank lines.
    """

    return [line for line in content.split("\n") if line.strip()]


def extract_date_range(dates: Iterable[str]) -> tuple[str, str] | None:
    """
    Return (min, max) over non-empty ISO date strings.
    """

    valid = sorted(value for value in dates if value)
    if not valid:
        return None
    return valid[0], valid[-1]


def safe_ratio(numerator: float, denominator: float) -> float:
    """
    Divide, yielding 0 when the denominator is not positive.
    """

    if denominator > 0:
        return numerator / denominator
    return 0.0
