"""
Parser for the "Detail Page Sales and Traffic" daily export.
"""

from __future__ import annotations

from app.domain.report_rows import DailySalesRow
from app.parsers.base import DelimitedReportParser, ParseContext, cell
from app.parsers.coercion import parse_currency, parse_int, parse_percentage
from app.parsers.column_resolver import ColumnMap


class DailySalesParser(DelimitedReportParser[DailySalesRow]):
    report_type = "daily_sales"
    target_store = "daily_sales_traffic"

    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> DailySalesRow | None:
        report_date = context.resolve_date(
            row_number, cell(values, 0), "date", message="Invalid or missing date"
        )
        if report_date is None:
            return None

        context.record_date(report_date)
        return DailySalesRow(
            date=report_date,
            ordered_product_sales=parse_currency(cell(values, 1)),
            units_ordered=parse_int(cell(values, 3)),
            total_order_items=parse_int(cell(values, 5)),
            page_views=parse_int(cell(values, 7)),
            sessions=parse_int(cell(values, 9)),
            buy_box_percentage=parse_percentage(cell(values, 11)),
            unit_session_percentage=parse_percentage(cell(values, 13)),
        )
