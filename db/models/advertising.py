"""
db/models/advertising.py

Advertising metrics and the SKU-to-campaign mapping derived from them.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, ReportRowMixin


class AdvertisingReportMetric(Base, ReportRowMixin):
    """
    Daily metrics at campaign, ad group or keyword granularity.

    ad_group_id and keyword_id are "" (never NULL) above their granularity so
    the composite unique key stays comparable.
    """

    __tablename__ = "advertising_report_metrics"
    business_key = ("client_id", "report_date", "campaign_id", "ad_group_id", "keyword_id")

    report_date: Mapped[date] = mapped_column(Date, nullable=False)
    campaign_id: Mapped[str] = mapped_column(Text, nullable=False)
    campaign_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    campaign_type: Mapped[str | None] = mapped_column(Text, nullable=True, comment="SP, SB, SD")
    campaign_status: Mapped[str | None] = mapped_column(Text, nullable=True)
    ad_group_id: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    ad_group_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    keyword_id: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    keyword_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    match_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    targeting_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    impressions: Mapped[int] = mapped_column(Integer, default=0)
    clicks: Mapped[int] = mapped_column(Integer, default=0)
    spend: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    orders: Mapped[int] = mapped_column(Integer, default=0)
    units: Mapped[int] = mapped_column(Integer, default=0)
    acos: Mapped[Decimal] = mapped_column(Numeric(12, 4), default=0)
    roas: Mapped[Decimal] = mapped_column(Numeric(12, 4), default=0)
    ctr: Mapped[Decimal] = mapped_column(Numeric(10, 6), default=0)
    cpc: Mapped[Decimal] = mapped_column(Numeric(12, 4), default=0)
    conversion_rate: Mapped[Decimal] = mapped_column(Numeric(10, 6), default=0)

    __table_args__ = (
        UniqueConstraint(
            "client_id",
            "report_date",
            "campaign_id",
            "ad_group_id",
            "keyword_id",
            name="uq_advertising_report_metrics_key",
        ),
        Index("ix_advertising_report_metrics_client_date", "client_id", "report_date"),
        Index("ix_advertising_report_metrics_campaign", "client_id", "campaign_id"),
    )


class SkuCampaignMapping(Base, ReportRowMixin):
    __tablename__ = "sku_campaign_mapping"
    business_key = ("client_id", "sku", "campaign_id")

    sku: Mapped[str] = mapped_column(Text, nullable=False)
    asin: Mapped[str | None] = mapped_column(Text, nullable=True)
    campaign_id: Mapped[str] = mapped_column(Text, nullable=False)
    campaign_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    ad_group_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    ad_group_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    campaign_type: Mapped[str | None] = mapped_column(Text, nullable=True, comment="SP, SB, SD")
    targeting_type: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="auto, manual, keyword, product",
    )

    __table_args__ = (
        UniqueConstraint("client_id", "sku", "campaign_id", name="uq_sku_campaign_mapping_key"),
    )
