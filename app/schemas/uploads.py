"""
app/schemas/uploads.py

Request and response schemas for report upload endpoints.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadRequest(CamelModel):
    client_id: uuid.UUID
    report_type: str = Field(..., min_length=1)
    content: str
    file_name: str | None = None


class ParseErrorResponse(CamelModel):
    """
    One row-level parse error; row 0 marks a file-level failure.
    """

    row: int = Field(..., ge=0)
    message: str
    field: str | None = None
    raw_value: str | None = None


class UploadResponse(CamelModel):
    success: bool
    report_type: str
    inserted: int = Field(..., ge=0)
    updated: int | None = None
    skipped: int = Field(0, ge=0)
    errors: int = Field(0, ge=0)
    error_details: list[ParseErrorResponse] = Field(default_factory=list)
    session_id: uuid.UUID


class UploadSessionResponse(CamelModel):
    id: uuid.UUID
    client_id: uuid.UUID
    client_name: str | None = None
    report_type: str
    file_name: str | None = None
    status: str
    records_processed: int = 0
    records_inserted: int = 0
    records_updated: int = 0
    records_skipped: int = 0
    error_message: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None


class UploadHistoryResponse(CamelModel):
    sessions: list[UploadSessionResponse]
    total: int = Field(..., ge=0)


class ReportTypeResponse(CamelModel):
    type: str
    label: str
    description: str
    file_hint: str
    table_name: str


class IngestionLogEntryResponse(CamelModel):
    id: uuid.UUID
    client_id: uuid.UUID
    source_type: str
    source_id: uuid.UUID | None = None
    table_name: str
    operation: str
    record_count: int
    date_range_start: date | None = None
    date_range_end: date | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class UploadDeleteResponse(CamelModel):
    success: bool
    deleted_records: int = Field(..., ge=0)
