"""
Report type catalog and parser registry.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
from datetime import date
from functools import lru_cache, partial
from typing import Any

from app.config import get_ingestion_settings
from app.parsers.advertising_bulk import AdvertisingBulkParser
from app.parsers.advertising_report import AdvertisingReportParser
from app.parsers.base import BaseReportParser, utc_today
from app.parsers.daily_sales import DailySalesParser
from app.parsers.idq_scores import IdqScoresParser
from app.parsers.inventory import InventoryParser
from app.parsers.parent_child import DEFAULT_MARKETPLACE_ID, ParentChildParser
from app.parsers.parent_performance import ParentPerformanceParser
from app.parsers.product_performance import ProductPerformanceParser
from app.parsers.restocking_limits import RestockingLimitsParser
from app.parsers.search_terms import SearchTermsParser
from app.parsers.sku_campaign_mapping import SkuCampaignMappingParser
from app.parsers.sku_rankings import SkuRankingsParser

ParserFactory = Callable[..., BaseReportParser[Any]]


class UnknownReportTypeError(ValueError):
    """
    Raised when a report type identifier is not registered.
    """


@dataclass(frozen=True)
class ReportTypeInfo:
    """
    Display and routing metadata for one report type.
    """

    type: str
    label: str
    description: str
    file_hint: str
    table_name: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


REPORT_TYPES: dict[str, ReportTypeInfo] = {
    info.type: info
    for info in (
        ReportTypeInfo(
            "daily_sales",
            "Daily Sales & Traffic",
            "Daily aggregate sales, sessions, page views",
            "Detail Page Sales and Traffic.csv",
            "daily_sales_traffic",
        ),
        ReportTypeInfo(
            "product_performance",
            "Product Performance (Child)",
            "Child ASIN-level sales and conversion data",
            "Detail Page Sales and Traffic By Child Item.csv",
            "product_performance",
        ),
        ReportTypeInfo(
            "parent_performance",
            "Product Performance (Parent)",
            "Parent ASIN-level sales and conversion data",
            "Detail Page Sales and Traffic By Parent Item.csv",
            "parent_performance",
        ),
        ReportTypeInfo(
            "search_terms",
            "Search Query Performance",
            "Search term impressions, clicks, purchases",
            "US_Search_Query_Performance*.csv",
            "search_term_performance",
        ),
        ReportTypeInfo(
            "inventory",
            "Inventory",
            "Current FBA inventory levels",
            "Amazon-fulfilled+Inventory*.txt",
            "inventory_snapshots",
        ),
        ReportTypeInfo(
            "advertising_report",
            "Advertising Reports (CSV)",
            "Campaign, ad group, and keyword performance metrics",
            "Sponsored Products/Brands/Display CSV reports",
            "advertising_report_metrics",
        ),
        ReportTypeInfo(
            "advertising_bulk",
            "Advertising Bulk File (Excel)",
            "Amazon Advertising bulk operations Excel file with all campaign types",
            "bulk-*.xlsx from Amazon Advertising console",
            "advertising_report_metrics",
        ),
        ReportTypeInfo(
            "sku_campaign_mapping",
            "SKU Campaign Mapping",
            "Map SKUs to advertising campaigns",
            "Custom mapping file with SKU, Campaign ID columns",
            "sku_campaign_mapping",
        ),
        ReportTypeInfo(
            "parent_child",
            "Parent-Child Mapping",
            "ASIN variation relationships",
            "Catalog export or custom mapping file",
            "parent_child_mapping",
        ),
        ReportTypeInfo(
            "restocking_limits",
            "Restocking Limits",
            "FBA storage limits and utilization",
            "FBA Inventory Age/Restocking report",
            "restocking_limits",
        ),
        ReportTypeInfo(
            "idq_scores",
            "IDQ Scores",
            "Inventory quality and stranded/excess inventory",
            "FBA Inventory Health or custom export",
            "idq_scores",
        ),
        ReportTypeInfo(
            "sku_rankings",
            "SKU Rankings",
            "BSR, pricing, and Keepa data",
            "Keepa export or custom rankings file",
            "sku_rankings",
        ),
    )
}


def is_valid_report_type(report_type: str | None) -> bool:
    return bool(report_type) and report_type in REPORT_TYPES


class ParserRegistry:
    """
    Report type -> parser lookup with lazily created, shared parser instances.

    Parsers keep no per-call state, so one instance per type is reused by
    concurrent uploads.
    """

    def __init__(
        self,
        registrations: Mapping[str, ParserFactory] | None = None,
        *,
        today: Callable[[], date] = utc_today,
        default_marketplace_id: str = DEFAULT_MARKETPLACE_ID,
    ) -> None:
        builtins: dict[str, ParserFactory] = {
            "daily_sales": DailySalesParser,
            "product_performance": ProductPerformanceParser,
            "parent_performance": ParentPerformanceParser,
            "search_terms": SearchTermsParser,
            "inventory": InventoryParser,
            "advertising_report": AdvertisingReportParser,
            "advertising_bulk": AdvertisingBulkParser,
            "sku_campaign_mapping": SkuCampaignMappingParser,
            "parent_child": partial(ParentChildParser, default_marketplace_id=default_marketplace_id),
            "restocking_limits": RestockingLimitsParser,
            "idq_scores": IdqScoresParser,
            "sku_rankings": SkuRankingsParser,
        }
        if registrations:
            builtins.update(registrations)
        self._registrations = builtins
        self._today = today
        self._parsers: dict[str, BaseReportParser[Any]] = {}
        self._lock = threading.Lock()

    def get_parser(self, report_type: str) -> BaseReportParser[Any]:
        parser = self._parsers.get(report_type)
        if parser is not None:
            return parser

        factory = self._registrations.get(report_type)
        if factory is None:
            raise UnknownReportTypeError(
                f"Invalid report type '{report_type}'. "
                f"Valid types: {', '.join(self.report_types())}."
            )

        with self._lock:
            parser = self._parsers.get(report_type)
            if parser is None:
                parser = factory(today=self._today)
                self._parsers[report_type] = parser
        return parser

    def is_valid_report_type(self, report_type: str | None) -> bool:
        return bool(report_type) and report_type in self._registrations

    def report_types(self) -> list[str]:
        return list(self._registrations)

    def get_report_type_info(self, report_type: str) -> ReportTypeInfo:
        info = REPORT_TYPES.get(report_type)
        if info is None:
            raise UnknownReportTypeError(f"Invalid report type '{report_type}'.")
        return info

    def get_all_report_type_info(self) -> list[ReportTypeInfo]:
        return [
            REPORT_TYPES[report_type]
            for report_type in self._registrations
            if report_type in REPORT_TYPES
        ]

    def get_target_store(self, report_type: str) -> str:
        return self.get_parser(report_type).get_target_store()


@lru_cache(maxsize=1)
def get_parser_registry() -> ParserRegistry:
    """
    Return the process-wide parser registry.
    """

    settings = get_ingestion_settings()
    return ParserRegistry(default_marketplace_id=settings.default_marketplace_id)
