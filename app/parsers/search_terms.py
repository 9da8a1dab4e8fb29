"""
Parser for the Brand Analytics "Search Query Performance" export.

The first line is exporter metadata and the second the real header, so row
numbers start at 3.
"""

from __future__ import annotations

from collections.abc import Sequence

from app.domain.report_rows import SearchTermRow
from app.parsers.base import DelimitedReportParser, ParseContext, cell
from app.parsers.coercion import clean_string, parse_float, parse_int
from app.parsers.column_resolver import ColumnMap


class SearchTermsParser(DelimitedReportParser[SearchTermRow]):
    report_type = "search_terms"
    target_store = "search_term_performance"
    header_lines = 2

    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> SearchTermRow | None:
        search_term = clean_string(cell(values, 0))
        if not search_term:
            context.add_error(row_number, "Missing search term", "search_term")
            return None

        reporting_date = context.resolve_date(
            row_number, cell(values, 33), "reporting_date", default=self.today_iso()
        )
        if reporting_date is None:
            return None
        context.record_date(reporting_date)
        return SearchTermRow(
            search_term=search_term,
            search_query_score=parse_int(cell(values, 1)),
            search_query_volume=parse_int(cell(values, 2)),
            impressions_total=parse_int(cell(values, 3)),
            impressions_brand=parse_int(cell(values, 4)),
            impressions_brand_share=parse_float(cell(values, 5)),
            clicks_total=parse_int(cell(values, 6)),
            clicks_brand=parse_int(cell(values, 8)),
            clicks_brand_share=parse_float(cell(values, 9)),
            purchases_total=parse_int(cell(values, 24)),
            purchases_brand=parse_int(cell(values, 26)),
            purchases_brand_share=parse_float(cell(values, 27)),
            reporting_date=reporting_date,
        )

    def deduplicate(self, rows: Sequence[SearchTermRow]) -> list[SearchTermRow]:
        """
        Keep the first row seen per (search term, reporting date).
        """

        kept: dict[tuple[str, str], SearchTermRow] = {}
        for row in rows:
            kept.setdefault((row.search_term, row.reporting_date), row)
        return list(kept.values())
