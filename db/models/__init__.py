"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.base import ReportRowMixin
from db.models.advertising import AdvertisingReportMetric, SkuCampaignMapping
from db.models.catalog import ParentChildMapping, SkuRanking
from db.models.client import Client
from db.models.ingestion_log import DataSourceType, IngestionLogEntry, IngestionOperation
from db.models.inventory_reports import IdqScore, InventorySnapshot, RestockingLimit
from db.models.sales_reports import (
    DailySalesTraffic,
    ParentPerformance,
    ProductPerformance,
    SearchTermPerformance,
)
from db.models.upload_session import UploadSession, UploadSessionStatus

REPORT_MODELS: dict[str, type[ReportRowMixin]] = {
    model.__tablename__: model
    for model in (
        DailySalesTraffic,
        ProductPerformance,
        ParentPerformance,
        SearchTermPerformance,
        InventorySnapshot,
        AdvertisingReportMetric,
        SkuCampaignMapping,
        ParentChildMapping,
        RestockingLimit,
        IdqScore,
        SkuRanking,
    )
}

__all__ = [
    "AdvertisingReportMetric",
    "Client",
    "DailySalesTraffic",
    "DataSourceType",
    "IdqScore",
    "IngestionLogEntry",
    "IngestionOperation",
    "InventorySnapshot",
    "ParentChildMapping",
    "ParentPerformance",
    "ProductPerformance",
    "REPORT_MODELS",
    "RestockingLimit",
    "SearchTermPerformance",
    "SkuCampaignMapping",
    "SkuRanking",
    "UploadSession",
    "UploadSessionStatus",
]
