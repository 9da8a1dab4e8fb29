"""
Parser for SKU-to-campaign mapping exports.
"""

from __future__ import annotations

from app.domain.report_rows import SkuCampaignMappingRow
from app.parsers.base import DelimitedReportParser, ParseContext
from app.parsers.column_resolver import ColumnMap

SKU_CAMPAIGN_COLUMNS: dict[str, list[str]] = {
    "sku": ["sku", "seller sku", "merchant sku"],
    "asin": ["asin", "child asin", "product asin"],
    "campaign_id": ["campaign id", "campaignid"],
    "campaign_name": ["campaign name", "campaignname", "campaign"],
    "ad_group_id": ["ad group id", "adgroupid"],
    "ad_group_name": ["ad group name", "adgroupname", "ad group"],
    "campaign_type": ["campaign type", "type", "ad type"],
    "targeting_type": ["targeting type", "targeting", "strategy"],
}

SKU_CAMPAIGN_EXCLUSIONS: dict[str, list[str]] = {
    "campaign_name": ["campaign id", "campaignid", "campaign type", "campaign status"],
    "ad_group_name": ["ad group id", "adgroupid"],
    "campaign_type": ["targeting type"],
}


def normalize_campaign_type(value: str) -> str:
    """
    Map free-form ad product names onto SP/SB/SD.

    Unrecognized values are returned uppercased.
    """

    if not value:
        return ""
    upper = value.upper()
    if "BRAND" in upper or upper == "SB":
        return "SB"
    if "DISPLAY" in upper or upper == "SD":
        return "SD"
    if "PRODUCT" in upper or upper == "SP":
        return "SP"
    return upper


def normalize_targeting_type(value: str) -> str:
    if not value:
        return ""
    lower = value.lower()
    for known in ("auto", "manual", "keyword", "product"):
        if known in lower:
            return known
    return lower


class SkuCampaignMappingParser(DelimitedReportParser[SkuCampaignMappingRow]):
    report_type = "sku_campaign_mapping"
    target_store = "sku_campaign_mapping"
    columns = SKU_CAMPAIGN_COLUMNS
    column_exclusions = SKU_CAMPAIGN_EXCLUSIONS

    def parse_row(
        self,
        values: list[str],
        row_number: int,
        context: ParseContext,
        columns: ColumnMap,
    ) -> SkuCampaignMappingRow | None:
        sku = columns.get(values, "sku")
        campaign_id = columns.get(values, "campaign_id")
        if not sku:
            context.add_error(row_number, "Missing SKU", "sku")
            return None
        if not campaign_id:
            context.add_error(row_number, "Missing Campaign ID", "campaign_id")
            return None

        return SkuCampaignMappingRow(
            sku=sku,
            asin=columns.get(values, "asin"),
            campaign_id=campaign_id,
            campaign_name=columns.get(values, "campaign_name"),
            ad_group_id=columns.get(values, "ad_group_id"),
            ad_group_name=columns.get(values, "ad_group_name"),
            campaign_type=normalize_campaign_type(columns.get(values, "campaign_type")),
            targeting_type=normalize_targeting_type(columns.get(values, "targeting_type")),
        )
