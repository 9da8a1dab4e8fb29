"""
Parser for Amazon Advertising bulk operations workbooks (.xlsx).

A bulk file carries one sheet per ad product plus optional search term
sheets. Sheets are classified by name; unrecognized sheets are still read
as Sponsored Products campaign sheets. Rows within a campaign sheet mix
campaign, ad group, keyword and targeting entities, told apart by the
"Entity" column.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from io import BytesIO
from typing import Any

from openpyxl import load_workbook

from app.domain.report_parsing import DateRange, ParseResult
from app.domain.report_rows import AdvertisingBulkRow
from app.parsers.base import BaseReportParser, ParseContext
from app.parsers.coercion import is_iso_date, parse_currency, parse_percentage

logger = logging.getLogger(__name__)

_FILENAME_RANGE_PATTERN = re.compile(r"(\d{8})-(\d{8})")
_KEYWORD_ENTITIES = {"keyword", "product targeting"}
_AD_GROUP_ENTITIES = {"ad group", "ad"}

SHEET_KIND_CAMPAIGN = "campaign"
SHEET_KIND_SEARCH_TERM = "search_term"

Cells = Mapping[str, Any]


@dataclass(frozen=True)
class SheetClassification:
    kind: str
    campaign_type: str


def classify_sheet(sheet_name: str) -> SheetClassification:
    """
    Classify a worksheet by case-insensitive name matching.
    """

    name = sheet_name.lower()
    if "sponsored products" in name or "sp campaigns" in name or name == "sp":
        return SheetClassification(SHEET_KIND_CAMPAIGN, "SP")
    if (
        "sponsored brands" in name
        or "sb campaigns" in name
        or "sb multi" in name
        or name == "sb"
    ):
        return SheetClassification(SHEET_KIND_CAMPAIGN, "SB")
    if "sponsored display" in name or "sd campaigns" in name or name == "sd":
        return SheetClassification(SHEET_KIND_CAMPAIGN, "SD")
    if "search term" in name:
        if "sp" in name:
            return SheetClassification(SHEET_KIND_SEARCH_TERM, "SP")
        if "sb" in name:
            return SheetClassification(SHEET_KIND_SEARCH_TERM, "SB")
        return SheetClassification(SHEET_KIND_SEARCH_TERM, "SP")
    return SheetClassification(SHEET_KIND_CAMPAIGN, "SP")


def extract_filename_date_range(file_name: str | None) -> DateRange | None:
    """
    Read a YYYYMMDD-YYYYMMDD range out of a bulk export filename.
    """

    if not file_name:
        return None
    match = _FILENAME_RANGE_PATTERN.search(file_name)
    if match is None:
        return None
    start, end = (f"{value[:4]}-{value[4:6]}-{value[6:]}" for value in match.groups())
    if not (is_iso_date(start) and is_iso_date(end)):
        return None
    return DateRange(start=start, end=end)


def decode_workbook_content(content: str) -> bytes:
    """
    Turn upload content into workbook bytes.

    Accepts a base64 data URL, bare base64 text, or a latin-1 binary string.
    """

    if "base64," in content:
        return base64.b64decode(content.split("base64,", 1)[1])
    try:
        return base64.b64decode(content.strip(), validate=True)
    except (binascii.Error, ValueError):
        return content.encode("latin-1")


def cell_text(value: Any) -> str:
    """
    Render a cell as text; empty, None and 0 become "".
    """

    if value is None or value == "" or value == 0:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def first_text(row: Cells, *columns: str) -> str:
    for column in columns:
        text = cell_text(row.get(column))
        if text:
            return text
    return ""


def cell_number(value: Any) -> float:
    if value is None or value == "" or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    return parse_currency(str(value))


def cell_percentage(value: Any) -> float:
    """
    Normalize a percentage cell to whole-percent units.

    Fractions below 1 (0.25) are scaled to 25; values already expressed as a
    percentage (25, "25%") are kept.
    """

    if value is None or value == "" or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
        return number * 100 if number < 1 else number
    text = str(value).strip()
    if "%" in text:
        return parse_percentage(text)
    number = parse_currency(text)
    return number * 100 if number < 1 else number


def iter_sheet_rows(worksheet: Any) -> Iterator[dict[str, Any]]:
    """
    Yield header-keyed dicts for each non-blank data row.
    """

    rows = worksheet.iter_rows(values_only=True)
    header_row = next(rows, None)
    if header_row is None:
        return
    header_columns: dict[str, int] = {}
    for index, value in enumerate(header_row):
        header = str(value).strip() if value is not None else ""
        if header:
            # repeated headers keep their first column
            header_columns.setdefault(header, index)

    for values in rows:
        record = {
            header: values[index]
            for header, index in header_columns.items()
            if index < len(values) and values[index] is not None and values[index] != ""
        }
        if record:
            yield record


class AdvertisingBulkParser(BaseReportParser[AdvertisingBulkRow]):
    report_type = "advertising_bulk"
    target_store = "advertising_report_metrics"

    def parse(self, content: str, file_name: str | None = None) -> ParseResult[AdvertisingBulkRow]:
        context = ParseContext(self.report_type)
        date_range = extract_filename_date_range(file_name)
        report_date = date_range.end if date_range is not None else self.today_iso()
        data: list[AdvertisingBulkRow] = []

        try:
            workbook = load_workbook(
                BytesIO(decode_workbook_content(content)),
                read_only=True,
                data_only=True,
            )
            try:
                for sheet_name in workbook.sheetnames:
                    classification = classify_sheet(sheet_name)
                    if classification.kind == SHEET_KIND_SEARCH_TERM:
                        sheet_rows = self._search_term_rows(
                            workbook[sheet_name], classification.campaign_type, report_date
                        )
                    else:
                        sheet_rows = self._campaign_rows(
                            workbook[sheet_name], classification.campaign_type, report_date
                        )
                    logger.debug(
                        "Bulk sheet parsed sheet=%s kind=%s type=%s rows=%s",
                        sheet_name,
                        classification.kind,
                        classification.campaign_type,
                        len(sheet_rows),
                    )
                    data.extend(sheet_rows)
            finally:
                workbook.close()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Bulk workbook could not be read file=%s error=%s", file_name, exc)
            context.add_error(0, f"Failed to parse Excel file: {exc}")

        return context.build_result(data, len(data), date_range=date_range)

    def _campaign_rows(
        self,
        worksheet: Any,
        campaign_type: str,
        report_date: str,
    ) -> list[AdvertisingBulkRow]:
        rows: list[AdvertisingBulkRow] = []
        for row in iter_sheet_rows(worksheet):
            campaign_id = cell_text(row.get("Campaign ID"))
            # Section header and total rows carry no campaign id.
            if not campaign_id:
                continue

            entity = cell_text(row.get("Entity")).lower()
            ad_group_id = keyword_id = keyword_text = match_type = ""
            if entity in _KEYWORD_ENTITIES:
                ad_group_id = first_text(row, "Ad Group ID")
                keyword_id = first_text(row, "Keyword ID", "Product Targeting ID")
                keyword_text = first_text(row, "Keyword Text", "Product Targeting Expression")
                match_type = first_text(row, "Match Type")
            elif entity in _AD_GROUP_ENTITIES:
                ad_group_id = first_text(row, "Ad Group ID")

            rows.append(
                self._build_row(
                    row,
                    report_date=report_date,
                    campaign_id=campaign_id,
                    campaign_type=campaign_type,
                    campaign_name=first_text(
                        row, "Campaign Name", "Campaign Name (Informational only)"
                    ),
                    ad_group_id=ad_group_id,
                    ad_group_name=first_text(
                        row, "Ad Group Name", "Ad Group Name (Informational only)"
                    ),
                    keyword_id=keyword_id,
                    keyword_text=keyword_text,
                    match_type=match_type,
                    targeting_type=first_text(row, "Targeting Type", "Tactic"),
                    sku=first_text(row, "SKU"),
                    asin=first_text(row, "ASIN (Informational only)", "ASIN"),
                )
            )
        return rows

    def _search_term_rows(
        self,
        worksheet: Any,
        campaign_type: str,
        report_date: str,
    ) -> list[AdvertisingBulkRow]:
        rows: list[AdvertisingBulkRow] = []
        for row in iter_sheet_rows(worksheet):
            campaign_id = cell_text(row.get("Campaign ID"))
            if not campaign_id:
                continue

            rows.append(
                self._build_row(
                    row,
                    report_date=report_date,
                    campaign_id=campaign_id,
                    campaign_type=campaign_type,
                    campaign_name=first_text(row, "Campaign Name (Informational only)"),
                    ad_group_id=first_text(row, "Ad Group ID"),
                    ad_group_name=first_text(row, "Ad Group Name (Informational only)"),
                    keyword_id=first_text(row, "Keyword ID", "Product Targeting ID"),
                    keyword_text=first_text(
                        row,
                        "Customer Search Term",
                        "Keyword Text",
                        "Product Targeting Expression",
                    ),
                    match_type=first_text(row, "Match Type"),
                    targeting_type="",
                    sku="",
                    asin="",
                )
            )
        return rows

    @staticmethod
    def _build_row(row: Cells, **identity: str) -> AdvertisingBulkRow:
        return AdvertisingBulkRow(
            campaign_status=first_text(row, "State", "Campaign State (Informational only)"),
            impressions=int(cell_number(row.get("Impressions"))),
            clicks=int(cell_number(row.get("Clicks"))),
            spend=cell_number(row.get("Spend")),
            sales=cell_number(row.get("Sales")),
            orders=int(cell_number(row.get("Orders"))),
            units=int(cell_number(row.get("Units"))),
            acos=cell_percentage(row.get("ACOS")),
            roas=cell_number(row.get("ROAS")),
            ctr=cell_percentage(row.get("Click-through Rate")),
            cpc=cell_number(row.get("CPC")),
            conversion_rate=cell_percentage(row.get("Conversion Rate")),
            **identity,
        )
