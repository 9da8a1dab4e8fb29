"""
Parser for the "Detail Page Sales and Traffic By Child Item" export.
"""

from __future__ import annotations

from collections.abc import Sequence

from app.domain.report_rows import ProductPerformanceRow
from app.parsers.base import DelimitedReportParser, ParseContext, cell
from app.parsers.coercion import clean_string, parse_currency, parse_int, parse_percentage
from app.parsers.column_resolver import ColumnMap

MAX_TITLE_LENGTH = 500
DEFAULT_TITLE = "Untitled"


class ProductPerformanceParser(DelimitedReportParser[ProductPerformanceRow]):
    report_type = "product_performance"
    target_store = "product_performance"

    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> ProductPerformanceRow | None:
        child_asin = clean_string(cell(values, 1))
        if not child_asin:
            context.add_error(row_number, "Missing child ASIN", "child_asin")
            return None

        title = clean_string(cell(values, 2)) or DEFAULT_TITLE
        return ProductPerformanceRow(
            parent_asin=clean_string(cell(values, 0)) or child_asin,
            child_asin=child_asin,
            title=title[:MAX_TITLE_LENGTH],
            sessions=parse_int(cell(values, 3)),
            page_views=parse_int(cell(values, 7)),
            buy_box_percentage=parse_percentage(cell(values, 11)),
            units_ordered=parse_int(cell(values, 13)),
            unit_session_percentage=parse_percentage(cell(values, 15)),
            ordered_product_sales=parse_currency(cell(values, 17)),
        )

    def deduplicate(self, rows: Sequence[ProductPerformanceRow]) -> list[ProductPerformanceRow]:
        """
        Collapse rows per child ASIN, keeping the one with the highest sales.

        Ties keep the earlier row.
        """

        kept: dict[str, ProductPerformanceRow] = {}
        for row in rows:
            existing = kept.get(row.child_asin)
            if existing is None or row.ordered_product_sales > existing.ordered_product_sales:
                kept[row.child_asin] = row
        return list(kept.values())
