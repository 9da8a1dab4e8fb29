"""
db/models/inventory_reports.py

FBA inventory tables: on-hand snapshots, storage limits and inventory
quality scores.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Index, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, ReportRowMixin


class InventorySnapshot(Base, ReportRowMixin):
    __tablename__ = "inventory_snapshots"
    business_key = ("client_id", "sku", "warehouse_condition", "snapshot_date")

    sku: Mapped[str] = mapped_column(Text, nullable=False)
    asin: Mapped[str] = mapped_column(Text, nullable=False)
    condition: Mapped[str | None] = mapped_column(Text, nullable=True)
    warehouse_condition: Mapped[str] = mapped_column(Text, nullable=False, default="")
    quantity_available: Mapped[int] = mapped_column(Integer, default=0)
    snapshot_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "client_id",
            "sku",
            "warehouse_condition",
            "snapshot_date",
            name="uq_inventory_snapshots_client_sku_condition_date",
        ),
        Index("ix_inventory_snapshots_client_date", "client_id", "snapshot_date"),
    )


class RestockingLimit(Base, ReportRowMixin):
    __tablename__ = "restocking_limits"
    business_key = ("client_id", "storage_type", "snapshot_date")

    storage_type: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="standard, oversize, apparel, footwear, flammable, aerosol",
    )
    utilization_percentage: Mapped[Decimal] = mapped_column(Numeric(7, 2), default=0)
    max_inventory_units: Mapped[int] = mapped_column(Integer, default=0)
    current_inventory_units: Mapped[int] = mapped_column(Integer, default=0)
    available_units: Mapped[int] = mapped_column(Integer, default=0)
    inbound_units: Mapped[int] = mapped_column(Integer, default=0)
    reserved_units: Mapped[int] = mapped_column(Integer, default=0)
    snapshot_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "client_id",
            "storage_type",
            "snapshot_date",
            name="uq_restocking_limits_client_type_date",
        ),
    )


class IdqScore(Base, ReportRowMixin):
    __tablename__ = "idq_scores"
    business_key = ("client_id", "sku", "snapshot_date")

    sku: Mapped[str] = mapped_column(Text, nullable=False)
    asin: Mapped[str | None] = mapped_column(Text, nullable=True)
    idq_score: Mapped[int] = mapped_column(Integer, default=0)
    stranded_inventory_flag: Mapped[bool] = mapped_column(Boolean, default=False)
    excess_inventory_flag: Mapped[bool] = mapped_column(Boolean, default=False)
    aged_inventory_flag: Mapped[bool] = mapped_column(Boolean, default=False)
    stranded_units: Mapped[int] = mapped_column(Integer, default=0)
    excess_units: Mapped[int] = mapped_column(Integer, default=0)
    aged_90_day_units: Mapped[int] = mapped_column(Integer, default=0)
    aged_180_day_units: Mapped[int] = mapped_column(Integer, default=0)
    aged_365_day_units: Mapped[int] = mapped_column(Integer, default=0)
    estimated_storage_fees: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    recommended_action: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="liquidate, removal, price_reduction, promotion, none",
    )
    snapshot_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint("client_id", "sku", "snapshot_date", name="uq_idq_scores_client_sku_date"),
    )
