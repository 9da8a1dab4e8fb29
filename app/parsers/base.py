"""
app/parsers/base.py

Base report parser abstractions.

Parser instances are shared through the registry, so they hold no per-call
state: errors, observed dates and column bindings live in a ParseContext
created for each parse() invocation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from datetime import date, datetime, timezone
from typing import Generic, Protocol, TypeVar

from app.domain.report_parsing import DateRange, ParseError, ParseMetadata, ParseResult
from app.parsers.coercion import (
    extract_date_range,
    is_iso_date,
    parse_date,
    split_csv_line,
    split_lines,
)
from app.parsers.column_resolver import ColumnMap, ColumnResolver

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def cell(values: Sequence[str], index: int) -> str:
    """
    Return the raw value at index, or "" for short rows.
    """

    if index < len(values):
        return values[index]
    return ""


class ParseContext:
    """
    Call-local accumulator for row errors and observed dates.
    """

    def __init__(self, report_type: str) -> None:
        self.report_type = report_type
        self.errors: list[ParseError] = []
        self.dates: list[str] = []

    def add_error(
        self,
        row_number: int,
        message: str,
        field: str | None = None,
        raw_value: str | None = None,
    ) -> None:
        self.errors.append(
            ParseError(row_number=row_number, message=message, field=field, raw_value=raw_value)
        )
        logger.debug(
            "Report parse error report_type=%s row=%s field=%s message=%s",
            self.report_type,
            row_number,
            field,
            message,
        )

    def record_date(self, value: str) -> None:
        self.dates.append(value)

    def resolve_date(
        self,
        row_number: int,
        raw_value: str,
        field: str,
        *,
        default: str = "",
        message: str = "Invalid date",
    ) -> str | None:
        """
        Normalize a date cell, falling back to default when it is blank.

        Records a row error and returns None when the result is not a
        calendar date.
        """

        value = parse_date(raw_value) or default
        if is_iso_date(value):
            return value
        self.add_error(row_number, message, field, raw_value)
        return None

    def build_result(
        self,
        data: list[RowT],
        total_rows: int,
        *,
        date_range: DateRange | None = None,
    ) -> ParseResult[RowT]:
        if date_range is None:
            bounds = extract_date_range(self.dates)
            if bounds is not None:
                date_range = DateRange(start=bounds[0], end=bounds[1])

        return ParseResult(
            data=data,
            errors=list(self.errors),
            metadata=ParseMetadata(
                total_rows=total_rows,
                parsed_rows=len(data),
                skipped_rows=total_rows - len(data),
                date_range=date_range,
            ),
        )


class SupportsDeduplicate(Protocol[RowT]):
    def deduplicate(self, rows: Sequence[RowT]) -> list[RowT]:
        ...


class BaseReportParser(ABC, Generic[RowT]):
    """
    Common parser interface.
    """

    report_type: str
    target_store: str

    def __init__(self, *, today: Callable[[], date] = utc_today) -> None:
        self._today = today

    def get_report_type(self) -> str:
        return self.report_type

    def get_target_store(self) -> str:
        return self.target_store

    def today_iso(self) -> str:
        return self._today().isoformat()

    @abstractmethod
    def parse(self, content: str, file_name: str | None = None) -> ParseResult[RowT]:
        """
        Parse raw file content into typed rows.

        Row problems are reported in the result; this never raises for them.
        """


class DelimitedReportParser(BaseReportParser[RowT]):
    """
    Line-oriented parser for CSV/TSV exports.

    Subclasses with a `columns` table are flexible-schema parsers: the last
    header line is compiled into a ColumnMap. Fixed-position parsers leave
    `columns` unset and address fields by index.
    """

    header_lines: int = 1
    columns: Mapping[str, Sequence[str]] | None = None
    column_exclusions: Mapping[str, Sequence[str]] | None = None

    def __init__(self, *, today: Callable[[], date] = utc_today) -> None:
        super().__init__(today=today)
        self._resolver = (
            ColumnResolver(self.columns, self.column_exclusions) if self.columns is not None else None
        )

    def split_line(self, line: str) -> list[str]:
        return split_csv_line(line)

    def bind_columns(self, headers: list[str]) -> ColumnMap:
        if self._resolver is None:
            return ColumnMap()
        return self._resolver.resolve(headers)

    def parse(self, content: str, file_name: str | None = None) -> ParseResult[RowT]:
        context = ParseContext(self.report_type)
        lines = split_lines(content)
        if len(lines) <= self.header_lines:
            return context.build_result([], 0)

        column_map = self.bind_columns(self.split_line(lines[self.header_lines - 1]))

        data_lines = lines[self.header_lines:]
        rows: list[RowT] = []
        for offset, line in enumerate(data_lines):
            row_number = offset + self.header_lines + 1
            try:
                row = self.parse_row(self.split_line(line), row_number, context, column_map)
            except Exception as exc:  # noqa: BLE001
                context.add_error(row_number, f"Parse error: {exc}")
                continue
            if row is not None:
                rows.append(row)

        return context.build_result(rows, len(data_lines))

    @abstractmethod
    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> RowT | None:
        """
        Build one row, or record an error on the context and return None.
        """
