"""
db/models/sales_reports.py

Business report tables: daily totals, child/parent ASIN performance and
search query performance.
"""

from __future__ import annotations

import datetime
from decimal import Decimal

from sqlalchemy import Date, Index, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, ReportRowMixin


class DailySalesTraffic(Base, ReportRowMixin):
    __tablename__ = "daily_sales_traffic"
    business_key = ("client_id", "date")

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    ordered_product_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    units_ordered: Mapped[int] = mapped_column(Integer, default=0)
    total_order_items: Mapped[int] = mapped_column(Integer, default=0)
    page_views: Mapped[int] = mapped_column(Integer, default=0)
    sessions: Mapped[int] = mapped_column(Integer, default=0)
    buy_box_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    unit_session_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)

    __table_args__ = (
        UniqueConstraint("client_id", "date", name="uq_daily_sales_traffic_client_date"),
    )


class ProductPerformance(Base, ReportRowMixin):
    __tablename__ = "product_performance"
    business_key = ("client_id", "child_asin")

    parent_asin: Mapped[str | None] = mapped_column(Text, nullable=True)
    child_asin: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    sessions: Mapped[int] = mapped_column(Integer, default=0)
    page_views: Mapped[int] = mapped_column(Integer, default=0)
    buy_box_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    units_ordered: Mapped[int] = mapped_column(Integer, default=0)
    unit_session_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    ordered_product_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    __table_args__ = (
        UniqueConstraint("client_id", "child_asin", name="uq_product_performance_client_child"),
        Index("ix_product_performance_client_parent", "client_id", "parent_asin"),
    )


class ParentPerformance(Base, ReportRowMixin):
    __tablename__ = "parent_performance"
    business_key = ("client_id", "parent_asin")

    parent_asin: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    sessions: Mapped[int] = mapped_column(Integer, default=0)
    sessions_b2b: Mapped[int] = mapped_column(Integer, default=0)
    page_views: Mapped[int] = mapped_column(Integer, default=0)
    page_views_b2b: Mapped[int] = mapped_column(Integer, default=0)
    buy_box_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    buy_box_percentage_b2b: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    units_ordered: Mapped[int] = mapped_column(Integer, default=0)
    units_ordered_b2b: Mapped[int] = mapped_column(Integer, default=0)
    unit_session_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    unit_session_percentage_b2b: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    ordered_product_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    ordered_product_sales_b2b: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    total_order_items: Mapped[int] = mapped_column(Integer, default=0)
    total_order_items_b2b: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        UniqueConstraint("client_id", "parent_asin", name="uq_parent_performance_client_parent"),
    )


class SearchTermPerformance(Base, ReportRowMixin):
    __tablename__ = "search_term_performance"
    business_key = ("client_id", "search_term", "reporting_date")

    search_term: Mapped[str] = mapped_column(Text, nullable=False)
    search_query_score: Mapped[int] = mapped_column(Integer, default=0)
    search_query_volume: Mapped[int] = mapped_column(Integer, default=0)
    impressions_total: Mapped[int] = mapped_column(Integer, default=0)
    impressions_brand: Mapped[int] = mapped_column(Integer, default=0)
    impressions_brand_share: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=0)
    clicks_total: Mapped[int] = mapped_column(Integer, default=0)
    clicks_brand: Mapped[int] = mapped_column(Integer, default=0)
    clicks_brand_share: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=0)
    purchases_total: Mapped[int] = mapped_column(Integer, default=0)
    purchases_brand: Mapped[int] = mapped_column(Integer, default=0)
    purchases_brand_share: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=0)
    reporting_date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "client_id",
            "search_term",
            "reporting_date",
            name="uq_search_term_performance_client_term_date",
        ),
        Index("ix_search_term_performance_client_date", "client_id", "reporting_date"),
    )
