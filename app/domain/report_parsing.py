"""
app/domain/report_parsing.py

Parse outcome types shared by every report parser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

RowT = TypeVar("RowT")


@dataclass(frozen=True)
class ParseError:
    """
    One row-level parse failure.

    row_number is 1-indexed against the original file, header lines included.
    Row 0 is reserved for file-level failures.
    """

    row_number: int
    message: str
    field: str | None = None
    raw_value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "row": self.row_number,
            "field": self.field,
            "message": self.message,
            "rawValue": self.raw_value,
        }


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive ISO date range inferred from parsed rows.
    """

    start: str
    end: str


@dataclass(frozen=True)
class ParseMetadata:
    """
    Row accounting for one parse call.

    skipped_rows is derived as total_rows - parsed_rows rather than counted
    per skipped line.
    """

    total_rows: int
    parsed_rows: int
    skipped_rows: int
    date_range: DateRange | None = None


@dataclass(frozen=True)
class ParseResult(Generic[RowT]):
    """
    Parsed rows, row errors and metadata produced by one parse call.
    """

    data: list[RowT]
    errors: list[ParseError] = field(default_factory=list)
    metadata: ParseMetadata = field(
        default_factory=lambda: ParseMetadata(total_rows=0, parsed_rows=0, skipped_rows=0)
    )

    @property
    def is_empty(self) -> bool:
        return not self.data
