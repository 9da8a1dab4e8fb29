"""
Parser for flat advertising performance CSV exports.

Column names differ between the campaign manager download, scheduled
reports and third-party tools, so columns are bound by header name.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.report_rows import AdvertisingMetricRow
from app.parsers.base import DelimitedReportParser, ParseContext
from app.parsers.coercion import parse_currency, parse_int, safe_ratio
from app.parsers.column_resolver import ColumnMap

ADVERTISING_REPORT_COLUMNS: dict[str, list[str]] = {
    "date": ["date", "report date", "day"],
    "campaign_id": ["campaign id", "campaignid"],
    "campaign_name": ["campaign name", "campaignname", "campaign"],
    "campaign_type": ["campaign type", "type"],
    "campaign_status": ["campaign status", "status", "state"],
    "ad_group_id": ["ad group id", "adgroupid"],
    "ad_group_name": ["ad group name", "adgroupname", "ad group"],
    "keyword_id": ["keyword id", "keywordid"],
    "keyword_text": ["keyword", "keyword text", "search term", "targeting"],
    "match_type": ["match type", "matchtype"],
    "targeting_type": ["targeting type", "targeting"],
    "impressions": ["impressions", "impr"],
    "clicks": ["clicks"],
    "spend": ["spend", "cost"],
    "sales": ["sales", "7 day total sales", "14 day total sales", "total sales"],
    "orders": ["orders", "7 day total orders", "14 day total orders", "total orders"],
    "units": ["units", "7 day total units", "14 day total units", "total units"],
}

# Headers that would otherwise be claimed by a broader variant of another key.
ADVERTISING_REPORT_EXCLUSIONS: dict[str, list[str]] = {
    "campaign_name": ["campaign id", "campaignid", "campaign type", "campaign status"],
    "campaign_type": ["match type", "targeting type"],
    "ad_group_name": ["ad group id", "adgroupid"],
    "keyword_text": ["keyword id", "keywordid", "targeting type"],
}


@dataclass(frozen=True)
class AdvertisingRatios:
    """
    Derived efficiency ratios, each 0 when its denominator is 0.
    """

    acos: float
    roas: float
    ctr: float
    cpc: float
    conversion_rate: float

    @classmethod
    def from_totals(
        cls,
        *,
        impressions: float,
        clicks: float,
        spend: float,
        sales: float,
        orders: float,
    ) -> "AdvertisingRatios":
        return cls(
            acos=safe_ratio(spend, sales),
            roas=safe_ratio(sales, spend),
            ctr=safe_ratio(clicks, impressions),
            cpc=safe_ratio(spend, clicks),
            conversion_rate=safe_ratio(orders, clicks),
        )


def detect_campaign_type(explicit_type: str, campaign_name: str) -> str:
    """
    Resolve SP/SB/SD from an explicit column, else from the campaign name.
    """

    if explicit_type:
        return explicit_type.upper()

    name = campaign_name.lower()
    if "sponsored brand" in name or " sb " in name:
        return "SB"
    if "sponsored display" in name or " sd " in name:
        return "SD"
    return "SP"


class AdvertisingReportParser(DelimitedReportParser[AdvertisingMetricRow]):
    report_type = "advertising_report"
    target_store = "advertising_report_metrics"
    columns = ADVERTISING_REPORT_COLUMNS
    column_exclusions = ADVERTISING_REPORT_EXCLUSIONS

    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> AdvertisingMetricRow | None:
        campaign_id = columns.get(values, "campaign_id")
        if not campaign_id:
            context.add_error(row_number, "Missing Campaign ID", "campaign_id")
            return None

        report_date = context.resolve_date(
            row_number, columns.get(values, "date"), "report_date", default=self.today_iso()
        )
        if report_date is None:
            return None
        impressions = parse_int(columns.get(values, "impressions"))
        clicks = parse_int(columns.get(values, "clicks"))
        spend = parse_currency(columns.get(values, "spend"))
        sales = parse_currency(columns.get(values, "sales"))
        orders = parse_int(columns.get(values, "orders"))
        ratios = AdvertisingRatios.from_totals(
            impressions=impressions,
            clicks=clicks,
            spend=spend,
            sales=sales,
            orders=orders,
        )
        campaign_name = columns.get(values, "campaign_name")

        context.record_date(report_date)
        return AdvertisingMetricRow(
            report_date=report_date,
            campaign_id=campaign_id,
            campaign_name=campaign_name,
            campaign_type=detect_campaign_type(columns.get(values, "campaign_type"), campaign_name),
            campaign_status=columns.get(values, "campaign_status"),
            ad_group_id=columns.get(values, "ad_group_id"),
            ad_group_name=columns.get(values, "ad_group_name"),
            keyword_id=columns.get(values, "keyword_id"),
            keyword_text=columns.get(values, "keyword_text"),
            match_type=columns.get(values, "match_type"),
            targeting_type=columns.get(values, "targeting_type"),
            impressions=impressions,
            clicks=clicks,
            spend=spend,
            sales=sales,
            orders=orders,
            units=parse_int(columns.get(values, "units")),
            acos=ratios.acos,
            roas=ratios.roas,
            ctr=ratios.ctr,
            cpc=ratios.cpc,
            conversion_rate=ratios.conversion_rate,
        )
