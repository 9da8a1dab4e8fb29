"""
Parser for inventory quality (IDQ / inventory health) exports.

Stranded, excess and aged flags are derived from unit counts when the
export only carries the counts.
"""

from __future__ import annotations

from app.domain.report_rows import IdqScoreRow
from app.parsers.base import DelimitedReportParser, ParseContext
from app.parsers.coercion import parse_boolean, parse_currency, parse_int
from app.parsers.column_resolver import ColumnMap

IDQ_COLUMNS: dict[str, list[str]] = {
    "sku": ["sku", "seller sku", "merchant sku"],
    "asin": ["asin", "fnsku"],
    "idq_score": ["idq score", "idq", "inventory score", "health score"],
    "stranded_flag": ["stranded", "is stranded"],
    "excess_flag": ["excess", "is excess"],
    "stranded_units": ["stranded units", "stranded qty", "stranded quantity"],
    "excess_units": ["excess units", "excess qty", "excess quantity"],
    "aged_90": ["90 day", "90+", "aged 90", "inv age 90"],
    "aged_180": ["180 day", "180+", "aged 180", "inv age 180"],
    "aged_365": ["365 day", "365+", "aged 365", "inv age 365", "1 year"],
    "storage_fees": ["storage fee", "estimated fee", "monthly fee", "fees"],
    "recommended_action": ["recommended action", "action", "recommendation"],
    "date": ["date", "snapshot date", "report date", "as of date"],
}

RECOMMENDED_ACTIONS: tuple[tuple[str, str], ...] = (
    ("liquidat", "liquidate"),
    ("remov", "removal"),
    ("price", "price_reduction"),
    ("promot", "promotion"),
)


def normalize_recommended_action(value: str) -> str:
    if not value:
        return "none"
    lower = value.lower()
    for needle, action in RECOMMENDED_ACTIONS:
        if needle in lower:
            return action
    return "none"


class IdqScoresParser(DelimitedReportParser[IdqScoreRow]):
    report_type = "idq_scores"
    target_store = "idq_scores"
    columns = IDQ_COLUMNS

    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> IdqScoreRow | None:
        sku = columns.get(values, "sku")
        if not sku:
            context.add_error(row_number, "Missing SKU", "sku")
            return None

        snapshot_date = context.resolve_date(
            row_number, columns.get(values, "date"), "snapshot_date", default=self.today_iso()
        )
        if snapshot_date is None:
            return None
        stranded_units = parse_int(columns.get(values, "stranded_units"))
        excess_units = parse_int(columns.get(values, "excess_units"))
        aged_90 = parse_int(columns.get(values, "aged_90"))
        aged_180 = parse_int(columns.get(values, "aged_180"))
        aged_365 = parse_int(columns.get(values, "aged_365"))

        context.record_date(snapshot_date)
        return IdqScoreRow(
            sku=sku,
            asin=columns.get(values, "asin"),
            idq_score=parse_int(columns.get(values, "idq_score")),
            stranded_inventory_flag=(
                stranded_units > 0 or parse_boolean(columns.get(values, "stranded_flag"))
            ),
            excess_inventory_flag=(
                excess_units > 0 or parse_boolean(columns.get(values, "excess_flag"))
            ),
            aged_inventory_flag=aged_90 > 0 or aged_180 > 0 or aged_365 > 0,
            stranded_units=stranded_units,
            excess_units=excess_units,
            aged_90_day_units=aged_90,
            aged_180_day_units=aged_180,
            aged_365_day_units=aged_365,
            estimated_storage_fees=parse_currency(columns.get(values, "storage_fees")),
            recommended_action=normalize_recommended_action(
                columns.get(values, "recommended_action")
            ),
            snapshot_date=snapshot_date,
        )
