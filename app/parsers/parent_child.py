"""
Parser for parent/child ASIN relationship exports.

Besides the standard columns, any header naming a known variation theme
(color, size, ...) is captured into the row's variation_attributes map.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from types import MappingProxyType

from app.domain.report_rows import ParentChildRow
from app.parsers.base import DelimitedReportParser, ParseContext, utc_today
from app.parsers.coercion import clean_string
from app.parsers.column_resolver import ColumnMap

DEFAULT_MARKETPLACE_ID = "ATVPDKIKX0DER"
DEFAULT_RELATIONSHIP_TYPE = "variation"

PARENT_CHILD_COLUMNS: dict[str, list[str]] = {
    "parent_asin": ["parent asin", "parentasin", "parent"],
    "child_asin": ["child asin", "childasin", "child", "asin"],
    "relationship_type": ["relationship type", "relationship", "type"],
    "marketplace_id": ["marketplace id", "marketplace", "market"],
}

# "asin" alone would otherwise bind the child key to a "Parent ASIN" column.
PARENT_CHILD_EXCLUSIONS: dict[str, list[str]] = {
    "child_asin": ["parent"],
}

# Header substrings, checked in order; each is also the attribute key.
VARIATION_ATTRIBUTES: tuple[str, ...] = (
    "color",
    "size",
    "style",
    "material",
    "pattern",
    "flavor",
    "scent",
    "model",
    "item package quantity",
    "unit count",
)

_VARIATION_PREFIX = "variation:"


class ParentChildParser(DelimitedReportParser[ParentChildRow]):
    report_type = "parent_child"
    target_store = "parent_child_mapping"
    columns = PARENT_CHILD_COLUMNS
    column_exclusions = PARENT_CHILD_EXCLUSIONS

    def __init__(
        self,
        *,
        today: Callable[[], date] = utc_today,
        default_marketplace_id: str = DEFAULT_MARKETPLACE_ID,
    ) -> None:
        super().__init__(today=today)
        self._default_marketplace_id = default_marketplace_id

    def bind_columns(self, headers: list[str]) -> ColumnMap:
        standard = super().bind_columns(headers)
        claimed = set(standard.bindings.values())
        bindings = dict(standard.bindings)

        # Each unclaimed header feeds at most one attribute; first column wins.
        for index, header in enumerate(standard.headers):
            if index in claimed:
                continue
            for attribute in VARIATION_ATTRIBUTES:
                if attribute in header:
                    bindings.setdefault(f"{_VARIATION_PREFIX}{attribute}", index)
                    break

        return ColumnMap(bindings=MappingProxyType(bindings), headers=standard.headers)

    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> ParentChildRow | None:
        parent_asin = columns.get(values, "parent_asin")
        child_asin = columns.get(values, "child_asin")
        if not parent_asin:
            context.add_error(row_number, "Missing Parent ASIN", "parent_asin")
            return None
        if not child_asin:
            context.add_error(row_number, "Missing Child ASIN", "child_asin")
            return None

        attributes: dict[str, str] = {}
        for key, index in columns.bindings.items():
            if not key.startswith(_VARIATION_PREFIX) or index >= len(values):
                continue
            value = clean_string(values[index])
            if value:
                attributes[key[len(_VARIATION_PREFIX):]] = value

        return ParentChildRow(
            parent_asin=parent_asin,
            child_asin=child_asin,
            relationship_type=columns.get(values, "relationship_type") or DEFAULT_RELATIONSHIP_TYPE,
            marketplace_id=columns.get(values, "marketplace_id") or self._default_marketplace_id,
            variation_attributes=attributes,
        )
