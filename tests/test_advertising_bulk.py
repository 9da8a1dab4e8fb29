"""
tests/test_advertising_bulk.py

Bulk advertising workbook parsing.
"""

from __future__ import annotations

import base64

import pytest
from openpyxl import Workbook

from app.parsers.advertising_bulk import (
    AdvertisingBulkParser,
    cell_percentage,
    cell_text,
    classify_sheet,
    extract_filename_date_range,
    iter_sheet_rows,
)
from conftest import build_xlsx, fixed_today, xlsx_data_url

CAMPAIGN_HEADER = [
    "Entity",
    "Campaign ID",
    "Ad Group ID",
    "Keyword ID",
    "Campaign Name",
    "Ad Group Name",
    "Keyword Text",
    "Match Type",
    "SKU",
    "State",
    "Impressions",
    "Clicks",
    "Spend",
    "Sales",
    "Orders",
    "Units",
    "ACOS",
    "ROAS",
    "Click-through Rate",
    "CPC",
    "Conversion Rate",
]


def campaign_sheet_row(**cells: object) -> list[object]:
    return [cells.get(column) for column in CAMPAIGN_HEADER]


@pytest.fixture()
def parser() -> AdvertisingBulkParser:
    return AdvertisingBulkParser(today=fixed_today)


def test_campaign_sheet_entities(parser: AdvertisingBulkParser) -> None:
    content = xlsx_data_url(
        {
            "Sponsored Products Campaigns": [
                CAMPAIGN_HEADER,
                campaign_sheet_row(
                    **{
                        "Entity": "Campaign",
                        "Campaign ID": "C-1",
                        "Campaign Name": "Launch",
                        "State": "enabled",
                        "Impressions": 100,
                        "Clicks": 10,
                        "Spend": 5.5,
                        "Sales": 22,
                        "Orders": 2,
                        "Units": 3,
                        "ACOS": 0.25,
                        "ROAS": 4,
                        "Click-through Rate": 25,
                        "CPC": 0.55,
                        "Conversion Rate": "20%",
                    }
                ),
                campaign_sheet_row(
                    **{
                        "Entity": "Keyword",
                        "Campaign ID": "C-1",
                        "Ad Group ID": "AG-1",
                        "Keyword ID": "K-1",
                        "Ad Group Name": "Mugs",
                        "Keyword Text": "travel mug",
                        "Match Type": "exact",
                        "Impressions": 40,
                    }
                ),
                campaign_sheet_row(
                    **{
                        "Entity": "Product Ad",
                        "Campaign ID": "C-1",
                        "Ad Group ID": "AG-1",
                        "SKU": "SKU-1",
                    }
                ),
                campaign_sheet_row(**{"Entity": "Campaign", "Campaign Name": "Totals"}),
            ]
        }
    )

    result = parser.parse(content, "bulk-a1b2-20250101-20250131-1700000000.xlsx")

    assert result.errors == []
    assert result.metadata.total_rows == 3
    assert result.metadata.date_range is not None
    assert (result.metadata.date_range.start, result.metadata.date_range.end) == (
        "2025-01-01",
        "2025-01-31",
    )

    campaign, keyword, product_ad = result.data
    assert campaign.report_date == "2025-01-31"
    assert campaign.campaign_type == "SP"
    assert campaign.campaign_name == "Launch"
    assert campaign.campaign_status == "enabled"
    assert (campaign.ad_group_id, campaign.keyword_id) == ("", "")
    assert (campaign.impressions, campaign.clicks, campaign.orders, campaign.units) == (100, 10, 2, 3)
    assert campaign.spend == pytest.approx(5.5)
    assert campaign.acos == pytest.approx(25.0)
    assert campaign.ctr == pytest.approx(25.0)
    assert campaign.conversion_rate == pytest.approx(20.0)
    assert campaign.roas == pytest.approx(4.0)

    assert (keyword.ad_group_id, keyword.keyword_id) == ("AG-1", "K-1")
    assert (keyword.keyword_text, keyword.match_type) == ("travel mug", "exact")
    assert keyword.ad_group_name == "Mugs"

    assert product_ad.sku == "SKU-1"
    assert product_ad.ad_group_id == ""


def test_sheets_are_classified_and_numeric_ids_rendered(parser: AdvertisingBulkParser) -> None:
    content = xlsx_data_url(
        {
            "Sponsored Brands Campaigns": [
                ["Entity", "Campaign ID", "Campaign Name", "Impressions"],
                ["Campaign", 987654321, "Hero", 10],
            ],
            "SP Search Term Report": [
                ["Campaign ID", "Ad Group ID", "Customer Search Term", "Match Type", "Clicks"],
                ["C-9", "AG-9", "insulated mug", "broad", 4],
            ],
        }
    )

    result = parser.parse(content)

    brand, search_term = result.data
    assert brand.campaign_type == "SB"
    assert brand.campaign_id == "987654321"
    assert brand.report_date == "2025-02-14"
    assert search_term.campaign_type == "SP"
    assert search_term.keyword_text == "insulated mug"
    assert search_term.ad_group_id == "AG-9"
    assert search_term.clicks == 4
    assert result.metadata.date_range is None


def test_bare_base64_content_is_accepted(parser: AdvertisingBulkParser) -> None:
    workbook = build_xlsx({"SP": [["Campaign ID", "Impressions"], ["C-1", 5]]})

    result = parser.parse(base64.b64encode(workbook).decode("ascii"), "bulk.xlsx")

    assert [row.campaign_id for row in result.data] == ["C-1"]


def test_corrupt_workbook_is_a_file_level_error(parser: AdvertisingBulkParser) -> None:
    content = "data:application/octet-stream;base64," + base64.b64encode(b"not a workbook").decode()

    result = parser.parse(content, "bulk.xlsx")

    assert result.data == []
    assert len(result.errors) == 1
    assert result.errors[0].row_number == 0
    assert result.errors[0].message.startswith("Failed to parse Excel file:")
    assert result.metadata.total_rows == 0


@pytest.mark.parametrize(
    ("sheet_name", "kind", "campaign_type"),
    [
        ("Sponsored Products Campaigns", "campaign", "SP"),
        ("SB Multi Ad Group Campaigns", "campaign", "SB"),
        ("Sponsored Display Campaigns", "campaign", "SD"),
        ("SB Search Term Report", "search_term", "SB"),
        ("Portfolios", "campaign", "SP"),
    ],
)
def test_classify_sheet(sheet_name: str, kind: str, campaign_type: str) -> None:
    classification = classify_sheet(sheet_name)

    assert (classification.kind, classification.campaign_type) == (kind, campaign_type)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0.25, 25.0), (25, 25.0), ("25%", 25.0), ("0.5", 50.0), (None, 0.0)],
)
def test_cell_percentage(value: object, expected: float) -> None:
    assert cell_percentage(value) == pytest.approx(expected)


def test_cell_text_treats_zero_as_empty() -> None:
    assert cell_text(0) == ""
    assert cell_text(12.0) == "12"
    assert cell_text(" abc ") == "abc"


def test_filename_without_range() -> None:
    assert extract_filename_date_range("bulk-export.xlsx") is None
    assert extract_filename_date_range(None) is None


def test_filename_range_with_impossible_dates() -> None:
    assert extract_filename_date_range("bulk-a1b2-20251301-20251399.xlsx") is None


def test_repeated_headers_read_the_first_column() -> None:
    worksheet = Workbook().active
    worksheet.append(["Entity", "Campaign ID", "Impressions", "Impressions"])
    worksheet.append(["Campaign", "C-1", 100, 999])
    worksheet.append(["Campaign", "C-2", None, 7])

    first, second = iter_sheet_rows(worksheet)

    assert first == {"Entity": "Campaign", "Campaign ID": "C-1", "Impressions": 100}
    assert second == {"Entity": "Campaign", "Campaign ID": "C-2"}
