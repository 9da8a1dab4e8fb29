"""
Repository for the append-only data ingestion log.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from sqlalchemy import Select, delete, select
from sqlalchemy.orm import Session

from db.models.ingestion_log import IngestionLogEntry


class IngestionLogRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_entry(
        self,
        *,
        organization_id: uuid.UUID,
        client_id: uuid.UUID,
        source_type: str,
        source_id: uuid.UUID | None,
        table_name: str,
        operation: str,
        record_count: int,
        date_range_start: date | None = None,
        date_range_end: date | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> IngestionLogEntry:
        entry = IngestionLogEntry(
            organization_id=organization_id,
            client_id=client_id,
            source_type=source_type,
            source_id=source_id,
            table_name=table_name,
            operation=operation,
            record_count=record_count,
            date_range_start=date_range_start,
            date_range_end=date_range_end,
            metadata_json=metadata or {},
        )
        self._session.add(entry)
        self._session.flush()
        return entry

    def list_for_client(
        self,
        *,
        client_id: uuid.UUID,
        limit: int = 100,
        source_type: str | None = None,
    ) -> list[IngestionLogEntry]:
        stmt: Select[tuple[IngestionLogEntry]] = select(IngestionLogEntry).where(
            IngestionLogEntry.client_id == client_id
        )
        if source_type:
            stmt = stmt.where(IngestionLogEntry.source_type == source_type)

        stmt = stmt.order_by(IngestionLogEntry.created_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def delete_by_source_id(self, source_id: uuid.UUID) -> int:
        result = self._session.execute(
            delete(IngestionLogEntry).where(IngestionLogEntry.source_id == source_id)
        )
        return int(result.rowcount or 0)
