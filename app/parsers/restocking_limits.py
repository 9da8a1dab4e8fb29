"""
Parser for FBA restock/capacity limit exports.
"""

from __future__ import annotations

from app.domain.report_rows import RestockingLimitRow
from app.parsers.base import DelimitedReportParser, ParseContext
from app.parsers.coercion import parse_int, parse_percentage
from app.parsers.column_resolver import ColumnMap

RESTOCKING_COLUMNS: dict[str, list[str]] = {
    "storage_type": ["storage type", "type", "category"],
    "utilization": ["utilization", "utilization %", "usage %", "usage"],
    "max_units": ["max units", "maximum units", "limit", "max inventory"],
    "current_units": ["current units", "current inventory", "inventory"],
    "available_units": ["available units", "available", "remaining"],
    "inbound_units": ["inbound units", "inbound", "shipping"],
    "reserved_units": ["reserved units", "reserved", "fc reserved"],
    "date": ["date", "snapshot date", "report date", "as of date"],
}

STORAGE_TYPES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("standard",), "standard"),
    (("oversize",), "oversize"),
    (("apparel",), "apparel"),
    (("footwear", "shoe"), "footwear"),
    (("flammable",), "flammable"),
    (("aerosol",), "aerosol"),
)


def normalize_storage_type(value: str) -> str:
    if not value:
        return ""
    lower = value.lower()
    for needles, storage_type in STORAGE_TYPES:
        if any(needle in lower for needle in needles):
            return storage_type
    return lower


class RestockingLimitsParser(DelimitedReportParser[RestockingLimitRow]):
    report_type = "restocking_limits"
    target_store = "restocking_limits"
    columns = RESTOCKING_COLUMNS

    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> RestockingLimitRow | None:
        storage_type = normalize_storage_type(columns.get(values, "storage_type"))
        if not storage_type:
            context.add_error(row_number, "Missing Storage Type", "storage_type")
            return None

        snapshot_date = context.resolve_date(
            row_number, columns.get(values, "date"), "snapshot_date", default=self.today_iso()
        )
        if snapshot_date is None:
            return None
        max_units = parse_int(columns.get(values, "max_units"))
        current_units = parse_int(columns.get(values, "current_units"))

        utilization = parse_percentage(columns.get(values, "utilization"))
        if utilization == 0 and max_units > 0:
            utilization = current_units / max_units * 100

        context.record_date(snapshot_date)
        return RestockingLimitRow(
            storage_type=storage_type,
            utilization_percentage=utilization,
            max_inventory_units=max_units,
            current_inventory_units=current_units,
            available_units=parse_int(columns.get(values, "available_units")),
            inbound_units=parse_int(columns.get(values, "inbound_units")),
            reserved_units=parse_int(columns.get(values, "reserved_units")),
            snapshot_date=snapshot_date,
        )
