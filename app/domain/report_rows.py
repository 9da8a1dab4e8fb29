"""
app/domain/report_rows.py

Typed row records produced by the report parsers.

Field names match the destination table columns so rows can be persisted
with dataclasses.asdict plus the ownership columns.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DailySalesRow:
    date: str
    ordered_product_sales: float
    units_ordered: int
    total_order_items: int
    page_views: int
    sessions: int
    buy_box_percentage: float
    unit_session_percentage: float


@dataclass(frozen=True)
class ProductPerformanceRow:
    """
    Child ASIN sales and traffic totals.
    """

    parent_asin: str
    child_asin: str
    title: str
    sessions: int
    page_views: int
    buy_box_percentage: float
    units_ordered: int
    unit_session_percentage: float
    ordered_product_sales: float


@dataclass(frozen=True)
class ParentPerformanceRow:
    """
    Parent ASIN sales and traffic totals with B2B splits.
    """

    parent_asin: str
    title: str
    sessions: int
    sessions_b2b: int
    page_views: int
    page_views_b2b: int
    buy_box_percentage: float
    buy_box_percentage_b2b: float
    units_ordered: int
    units_ordered_b2b: int
    unit_session_percentage: float
    unit_session_percentage_b2b: float
    ordered_product_sales: float
    ordered_product_sales_b2b: float
    total_order_items: int
    total_order_items_b2b: int


@dataclass(frozen=True)
class SearchTermRow:
    search_term: str
    search_query_score: int
    search_query_volume: int
    impressions_total: int
    impressions_brand: int
    impressions_brand_share: float
    clicks_total: int
    clicks_brand: int
    clicks_brand_share: float
    purchases_total: int
    purchases_brand: int
    purchases_brand_share: float
    reporting_date: str


@dataclass(frozen=True)
class InventoryRow:
    """
    One FBA inventory line. The snapshot date is assigned at persist time.
    """

    sku: str
    asin: str
    condition: str
    warehouse_condition: str
    quantity_available: int


@dataclass(frozen=True)
class AdvertisingMetricRow:
    """
    Campaign, ad group or keyword level advertising metrics for one day.

    Ratios are fractions (0.1 == 10%) when derived from counts.
    """

    report_date: str
    campaign_id: str
    campaign_name: str
    campaign_type: str
    campaign_status: str
    ad_group_id: str
    ad_group_name: str
    keyword_id: str
    keyword_text: str
    match_type: str
    targeting_type: str
    impressions: int
    clicks: int
    spend: float
    sales: float
    orders: int
    units: int
    acos: float
    roas: float
    ctr: float
    cpc: float
    conversion_rate: float


@dataclass(frozen=True)
class AdvertisingBulkRow(AdvertisingMetricRow):
    """
    Bulk workbook row; keeps the advertised SKU/ASIN for mapping write-back.
    """

    sku: str = ""
    asin: str = ""


@dataclass(frozen=True)
class SkuCampaignMappingRow:
    sku: str
    asin: str
    campaign_id: str
    campaign_name: str
    ad_group_id: str
    ad_group_name: str
    campaign_type: str
    targeting_type: str


@dataclass(frozen=True)
class ParentChildRow:
    parent_asin: str
    child_asin: str
    relationship_type: str
    marketplace_id: str
    variation_attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RestockingLimitRow:
    storage_type: str
    utilization_percentage: float
    max_inventory_units: int
    current_inventory_units: int
    available_units: int
    inbound_units: int
    reserved_units: int
    snapshot_date: str


@dataclass(frozen=True)
class IdqScoreRow:
    sku: str
    asin: str
    idq_score: int
    stranded_inventory_flag: bool
    excess_inventory_flag: bool
    aged_inventory_flag: bool
    stranded_units: int
    excess_units: int
    aged_90_day_units: int
    aged_180_day_units: int
    aged_365_day_units: int
    estimated_storage_fees: float
    recommended_action: str
    snapshot_date: str


@dataclass(frozen=True)
class SkuRankingRow:
    """
    Catalog rank, pricing and review snapshot for one ASIN.
    """

    asin: str
    sku: str
    category_rank: int
    category_name: str
    subcategory_rank: int
    subcategory_name: str
    current_price: float
    lowest_fba_price: float
    buybox_price: float
    buybox_seller: str
    is_buybox_amazon: bool
    review_count: int
    review_rating: float
    keepa_drops_30d: int
    keepa_drops_90d: int
    keepa_monthly_sales_estimate: int
    snapshot_date: str
