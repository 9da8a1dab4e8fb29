"""
db/models/ingestion_log.py

Append-only audit trail of persisted report data.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class DataSourceType:
    MANUAL_UPLOAD = "manual_upload"
    SP_API = "sp_api"
    ADVERTISING_API = "advertising_api"
    KEEPA_API = "keepa_api"

    ALL = frozenset({MANUAL_UPLOAD, SP_API, ADVERTISING_API, KEEPA_API})


class IngestionOperation:
    INSERT = "insert"
    UPDATE = "update"
    UPSERT = "upsert"


class IngestionLogEntry(Base):
    """
    One persist step. Rows are never updated.
    """

    __tablename__ = "data_ingestion_log"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
    )
    source_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="manual_upload, sp_api, advertising_api, keepa_api",
    )
    source_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
        comment="Upload session id or sync job id",
    )
    table_name: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    operation: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="insert, update, upsert",
    )
    record_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    date_range_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    date_range_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    metadata_json: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSONB,
        nullable=False,
        default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_data_ingestion_log_client_id_created_at", "client_id", "created_at"),
        Index("ix_data_ingestion_log_source_id", "source_id"),
    )
