"""
Parser for the tab-separated "Amazon-fulfilled Inventory" export.
"""

from __future__ import annotations

from app.domain.report_rows import InventoryRow
from app.parsers.base import DelimitedReportParser, ParseContext, cell
from app.parsers.coercion import clean_string, parse_int, split_tsv_line
from app.parsers.column_resolver import ColumnMap


class InventoryParser(DelimitedReportParser[InventoryRow]):
    report_type = "inventory"
    target_store = "inventory_snapshots"

    def split_line(self, line: str) -> list[str]:
        return split_tsv_line(line)

    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> InventoryRow | None:
        asin = clean_string(cell(values, 2))
        if not asin:
            context.add_error(row_number, "Missing ASIN", "asin")
            return None

        return InventoryRow(
            sku=clean_string(cell(values, 0)),
            asin=asin,
            condition=clean_string(cell(values, 3)),
            warehouse_condition=clean_string(cell(values, 4)),
            quantity_available=parse_int(cell(values, 5)),
        )
