"""
Parser for the "Detail Page Sales and Traffic By Parent Item" export.

Columns come in total/B2B pairs.
"""

from __future__ import annotations

from collections.abc import Sequence

from app.domain.report_rows import ParentPerformanceRow
from app.parsers.base import DelimitedReportParser, ParseContext, cell
from app.parsers.coercion import clean_string, parse_currency, parse_int, parse_percentage
from app.parsers.column_resolver import ColumnMap
from app.parsers.product_performance import DEFAULT_TITLE, MAX_TITLE_LENGTH


class ParentPerformanceParser(DelimitedReportParser[ParentPerformanceRow]):
    report_type = "parent_performance"
    target_store = "parent_performance"

    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> ParentPerformanceRow | None:
        parent_asin = clean_string(cell(values, 0))
        if not parent_asin:
            context.add_error(row_number, "Missing parent ASIN", "parent_asin")
            return None

        title = clean_string(cell(values, 1)) or DEFAULT_TITLE
        return ParentPerformanceRow(
            parent_asin=parent_asin,
            title=title[:MAX_TITLE_LENGTH],
            sessions=parse_int(cell(values, 2)),
            sessions_b2b=parse_int(cell(values, 3)),
            page_views=parse_int(cell(values, 6)),
            page_views_b2b=parse_int(cell(values, 7)),
            buy_box_percentage=parse_percentage(cell(values, 10)),
            buy_box_percentage_b2b=parse_percentage(cell(values, 11)),
            units_ordered=parse_int(cell(values, 12)),
            units_ordered_b2b=parse_int(cell(values, 13)),
            unit_session_percentage=parse_percentage(cell(values, 14)),
            unit_session_percentage_b2b=parse_percentage(cell(values, 15)),
            ordered_product_sales=parse_currency(cell(values, 16)),
            ordered_product_sales_b2b=parse_currency(cell(values, 17)),
            total_order_items=parse_int(cell(values, 18)),
            total_order_items_b2b=parse_int(cell(values, 19)),
        )

    def deduplicate(self, rows: Sequence[ParentPerformanceRow]) -> list[ParentPerformanceRow]:
        kept: dict[str, ParentPerformanceRow] = {}
        for row in rows:
            existing = kept.get(row.parent_asin)
            if existing is None or row.ordered_product_sales > existing.ordered_product_sales:
                kept[row.parent_asin] = row
        return list(kept.values())
