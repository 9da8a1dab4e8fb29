"""
app/domain/upload_session.py

Detached views of upload sessions and ingestion log entries.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any


@dataclass(frozen=True)
class UploadSessionSnapshot:
    """
    Point-in-time copy of one upload session row.
    """

    id: uuid.UUID
    organization_id: uuid.UUID
    client_id: uuid.UUID
    report_type: str
    status: str
    file_name: str | None = None
    file_size_bytes: int | None = None
    user_id: uuid.UUID | None = None
    client_name: str | None = None
    records_processed: int = 0
    records_inserted: int = 0
    records_updated: int = 0
    records_skipped: int = 0
    error_message: str | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class UploadHistoryPage:
    sessions: list[UploadSessionSnapshot]
    total: int


@dataclass(frozen=True)
class IngestionLogRecord:
    id: uuid.UUID
    organization_id: uuid.UUID
    client_id: uuid.UUID
    source_type: str
    source_id: uuid.UUID | None
    table_name: str
    operation: str
    record_count: int
    date_range_start: date | None = None
    date_range_end: date | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
