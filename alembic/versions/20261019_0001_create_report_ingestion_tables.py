"""create clients, upload tracking and report data tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

REPORT_TABLES = (
    "daily_sales_traffic",
    "product_performance",
    "parent_performance",
    "search_term_performance",
    "inventory_snapshots",
    "advertising_report_metrics",
    "sku_campaign_mapping",
    "parent_child_mapping",
    "restocking_limits",
    "idq_scores",
    "sku_rankings",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def _create_report_table(name: str, *columns: sa.Column, unique: tuple[str, tuple[str, ...]]) -> None:
    """
    Create a report data table with ownership, lineage and timestamp columns.
    """

    op.create_table(
        name,
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), nullable=False),
        *columns,
        sa.Column(
            "data_source_type",
            sa.String(length=32),
            nullable=False,
            server_default="manual_upload",
            comment="manual_upload | sp_api | advertising_api | keepa_api",
        ),
        sa.Column(
            "data_source_id",
            postgresql.UUID(as_uuid=True),
            nullable=True,
            comment="Upload session or sync job that produced the row",
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(*unique[1], name=unique[0]),
    )
    op.create_index(f"ix_{name}_data_source_id", name, ["data_source_id"])


def _int(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), nullable=True)


def _num(name: str, precision: int, scale: int) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision, scale), nullable=True)


def _text(name: str, nullable: bool = True) -> sa.Column:
    return sa.Column(name, sa.Text(), nullable=nullable)


def upgrade() -> None:
    # ---------------------------------------------------------------------------
    # clients, upload_sessions, data_ingestion_log
    # ---------------------------------------------------------------------------
    op.create_table(
        "clients",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("marketplace_id", sa.String(length=32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clients_organization_id", "clients", ["organization_id"])
    op.create_index("ix_clients_is_active", "clients", ["is_active"])

    op.create_table(
        "upload_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("report_type", sa.String(length=64), nullable=False),
        sa.Column("file_name", sa.Text(), nullable=True),
        sa.Column("file_size_bytes", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, comment="pending, processing, completed, failed"),
        sa.Column("records_processed", sa.Integer(), nullable=False),
        sa.Column("records_inserted", sa.Integer(), nullable=False),
        sa.Column("records_updated", sa.Integer(), nullable=False),
        sa.Column("records_skipped", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.text("now()")),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_upload_sessions_organization_id", "upload_sessions", ["organization_id"])
    op.create_index("ix_upload_sessions_client_id", "upload_sessions", ["client_id"])
    op.create_index("ix_upload_sessions_status", "upload_sessions", ["status"])
    op.create_index("ix_upload_sessions_created_at", "upload_sessions", ["created_at"])

    op.create_table(
        "data_ingestion_log",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source_type", sa.String(length=32), nullable=False),
        sa.Column("source_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("table_name", sa.String(length=64), nullable=False),
        sa.Column("operation", sa.String(length=16), nullable=False),
        sa.Column("record_count", sa.Integer(), nullable=False),
        sa.Column("date_range_start", sa.Date(), nullable=True),
        sa.Column("date_range_end", sa.Date(), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_data_ingestion_log_client_id_created_at",
        "data_ingestion_log",
        ["client_id", "created_at"],
    )
    op.create_index("ix_data_ingestion_log_source_id", "data_ingestion_log", ["source_id"])

    # ---------------------------------------------------------------------------
    # Business reports
    # ---------------------------------------------------------------------------
    _create_report_table(
        "daily_sales_traffic",
        sa.Column("date", sa.Date(), nullable=False),
        _num("ordered_product_sales", 12, 2),
        _int("units_ordered"),
        _int("total_order_items"),
        _int("page_views"),
        _int("sessions"),
        _num("buy_box_percentage", 5, 2),
        _num("unit_session_percentage", 5, 2),
        unique=("uq_daily_sales_traffic_client_date", ("client_id", "date")),
    )

    _create_report_table(
        "product_performance",
        _text("parent_asin"),
        _text("child_asin", nullable=False),
        _text("title"),
        _int("sessions"),
        _int("page_views"),
        _num("buy_box_percentage", 5, 2),
        _int("units_ordered"),
        _num("unit_session_percentage", 5, 2),
        _num("ordered_product_sales", 12, 2),
        unique=("uq_product_performance_client_child", ("client_id", "child_asin")),
    )
    op.create_index(
        "ix_product_performance_client_parent",
        "product_performance",
        ["client_id", "parent_asin"],
    )

    _create_report_table(
        "parent_performance",
        _text("parent_asin", nullable=False),
        _text("title"),
        _int("sessions"),
        _int("sessions_b2b"),
        _int("page_views"),
        _int("page_views_b2b"),
        _num("buy_box_percentage", 5, 2),
        _num("buy_box_percentage_b2b", 5, 2),
        _int("units_ordered"),
        _int("units_ordered_b2b"),
        _num("unit_session_percentage", 5, 2),
        _num("unit_session_percentage_b2b", 5, 2),
        _num("ordered_product_sales", 12, 2),
        _num("ordered_product_sales_b2b", 12, 2),
        _int("total_order_items"),
        _int("total_order_items_b2b"),
        unique=("uq_parent_performance_client_parent", ("client_id", "parent_asin")),
    )

    _create_report_table(
        "search_term_performance",
        _text("search_term", nullable=False),
        _int("search_query_score"),
        _int("search_query_volume"),
        _int("impressions_total"),
        _int("impressions_brand"),
        _num("impressions_brand_share", 10, 4),
        _int("clicks_total"),
        _int("clicks_brand"),
        _num("clicks_brand_share", 10, 4),
        _int("purchases_total"),
        _int("purchases_brand"),
        _num("purchases_brand_share", 10, 4),
        sa.Column("reporting_date", sa.Date(), nullable=True),
        unique=(
            "uq_search_term_performance_client_term_date",
            ("client_id", "search_term", "reporting_date"),
        ),
    )
    op.create_index(
        "ix_search_term_performance_client_date",
        "search_term_performance",
        ["client_id", "reporting_date"],
    )

    # ---------------------------------------------------------------------------
    # Inventory
    # ---------------------------------------------------------------------------
    _create_report_table(
        "inventory_snapshots",
        _text("sku", nullable=False),
        _text("asin", nullable=False),
        _text("condition"),
        _text("warehouse_condition", nullable=False),
        _int("quantity_available"),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        unique=(
            "uq_inventory_snapshots_client_sku_condition_date",
            ("client_id", "sku", "warehouse_condition", "snapshot_date"),
        ),
    )
    op.create_index(
        "ix_inventory_snapshots_client_date",
        "inventory_snapshots",
        ["client_id", "snapshot_date"],
    )

    _create_report_table(
        "restocking_limits",
        _text("storage_type", nullable=False),
        _num("utilization_percentage", 7, 2),
        _int("max_inventory_units"),
        _int("current_inventory_units"),
        _int("available_units"),
        _int("inbound_units"),
        _int("reserved_units"),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        unique=("uq_restocking_limits_client_type_date", ("client_id", "storage_type", "snapshot_date")),
    )

    _create_report_table(
        "idq_scores",
        _text("sku", nullable=False),
        _text("asin"),
        _int("idq_score"),
        sa.Column("stranded_inventory_flag", sa.Boolean(), nullable=True),
        sa.Column("excess_inventory_flag", sa.Boolean(), nullable=True),
        sa.Column("aged_inventory_flag", sa.Boolean(), nullable=True),
        _int("stranded_units"),
        _int("excess_units"),
        _int("aged_90_day_units"),
        _int("aged_180_day_units"),
        _int("aged_365_day_units"),
        _num("estimated_storage_fees", 10, 2),
        _text("recommended_action"),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        unique=("uq_idq_scores_client_sku_date", ("client_id", "sku", "snapshot_date")),
    )

    # ---------------------------------------------------------------------------
    # Advertising
    # ---------------------------------------------------------------------------
    _create_report_table(
        "advertising_report_metrics",
        sa.Column("report_date", sa.Date(), nullable=False),
        _text("campaign_id", nullable=False),
        _text("campaign_name"),
        _text("campaign_type"),
        _text("campaign_status"),
        sa.Column("ad_group_id", sa.Text(), nullable=False, server_default=""),
        _text("ad_group_name"),
        sa.Column("keyword_id", sa.Text(), nullable=False, server_default=""),
        _text("keyword_text"),
        _text("match_type"),
        _text("targeting_type"),
        _int("impressions"),
        _int("clicks"),
        _num("spend", 12, 2),
        _num("sales", 12, 2),
        _int("orders"),
        _int("units"),
        _num("acos", 12, 4),
        _num("roas", 12, 4),
        _num("ctr", 10, 6),
        _num("cpc", 12, 4),
        _num("conversion_rate", 10, 6),
        unique=(
            "uq_advertising_report_metrics_key",
            ("client_id", "report_date", "campaign_id", "ad_group_id", "keyword_id"),
        ),
    )
    op.create_index(
        "ix_advertising_report_metrics_client_date",
        "advertising_report_metrics",
        ["client_id", "report_date"],
    )
    op.create_index(
        "ix_advertising_report_metrics_campaign",
        "advertising_report_metrics",
        ["client_id", "campaign_id"],
    )

    _create_report_table(
        "sku_campaign_mapping",
        _text("sku", nullable=False),
        _text("asin"),
        _text("campaign_id", nullable=False),
        _text("campaign_name"),
        _text("ad_group_id"),
        _text("ad_group_name"),
        _text("campaign_type"),
        _text("targeting_type"),
        unique=("uq_sku_campaign_mapping_key", ("client_id", "sku", "campaign_id")),
    )

    # ---------------------------------------------------------------------------
    # Catalog
    # ---------------------------------------------------------------------------
    _create_report_table(
        "parent_child_mapping",
        _text("parent_asin", nullable=False),
        _text("child_asin", nullable=False),
        _text("relationship_type", nullable=False),
        sa.Column("variation_attributes", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        _text("marketplace_id", nullable=False),
        unique=("uq_parent_child_mapping_key", ("client_id", "parent_asin", "child_asin")),
    )

    _create_report_table(
        "sku_rankings",
        _text("asin", nullable=False),
        _text("sku"),
        _int("category_rank"),
        _text("category_name"),
        _int("subcategory_rank"),
        _text("subcategory_name"),
        _num("current_price", 10, 2),
        _num("lowest_fba_price", 10, 2),
        _num("buybox_price", 10, 2),
        _text("buybox_seller"),
        sa.Column("is_buybox_amazon", sa.Boolean(), nullable=True),
        _int("review_count"),
        _num("review_rating", 3, 2),
        _int("keepa_drops_30d"),
        _int("keepa_drops_90d"),
        _int("keepa_monthly_sales_estimate"),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        unique=("uq_sku_rankings_key", ("client_id", "asin", "snapshot_date")),
    )


def downgrade() -> None:
    for table in reversed(REPORT_TABLES):
        op.drop_table(table)
    op.drop_table("data_ingestion_log")
    op.drop_table("upload_sessions")
    op.drop_table("clients")
