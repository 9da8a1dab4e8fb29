"""
db/models/catalog.py

Catalog structure and ranking snapshots.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, Date, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, ReportRowMixin


class ParentChildMapping(Base, ReportRowMixin):
    __tablename__ = "parent_child_mapping"
    business_key = ("client_id", "parent_asin", "child_asin")

    parent_asin: Mapped[str] = mapped_column(Text, nullable=False)
    child_asin: Mapped[str] = mapped_column(Text, nullable=False)
    relationship_type: Mapped[str] = mapped_column(Text, nullable=False, default="variation")
    variation_attributes: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        comment='e.g. {"color": "Red", "size": "Large"}',
    )
    marketplace_id: Mapped[str] = mapped_column(Text, nullable=False, default="ATVPDKIKX0DER")

    __table_args__ = (
        UniqueConstraint(
            "client_id",
            "parent_asin",
            "child_asin",
            name="uq_parent_child_mapping_key",
        ),
    )


class SkuRanking(Base, ReportRowMixin):
    __tablename__ = "sku_rankings"
    business_key = ("client_id", "asin", "snapshot_date")

    asin: Mapped[str] = mapped_column(Text, nullable=False)
    sku: Mapped[str | None] = mapped_column(Text, nullable=True)
    category_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    category_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    subcategory_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    subcategory_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    current_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    lowest_fba_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    buybox_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    buybox_seller: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_buybox_amazon: Mapped[bool] = mapped_column(Boolean, default=False)
    review_count: Mapped[int] = mapped_column(Integer, default=0)
    review_rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), default=0)
    keepa_drops_30d: Mapped[int] = mapped_column(Integer, default=0)
    keepa_drops_90d: Mapped[int] = mapped_column(Integer, default=0)
    keepa_monthly_sales_estimate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    snapshot_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint("client_id", "asin", "snapshot_date", name="uq_sku_rankings_key"),
    )
