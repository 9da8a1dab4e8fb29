"""
Shared fixtures: in-memory row store and session tracker, fixed clock,
and an in-memory .xlsx builder.
"""

from __future__ import annotations

import base64
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import date, datetime, timezone
from io import BytesIO
from typing import Any

import pytest
from openpyxl import Workbook
from sqlalchemy.exc import OperationalError

from app.domain.report_parsing import DateRange
from app.domain.upload_session import IngestionLogRecord, UploadHistoryPage, UploadSessionSnapshot
from app.parsers.registry import ParserRegistry
from app.services.report_ingestion_service import ReportIngestionService
from app.storage.base import ReportDataStore
from db.models import REPORT_MODELS
from db.repositories.errors import UploadSessionNotFoundError
from db.repositories.report_data_repository import UpsertCounts

FIXED_TODAY = date(2025, 2, 14)


def fixed_today() -> date:
    return FIXED_TODAY


class InMemoryReportDataStore(ReportDataStore):
    """
    Dict-backed store keyed by each table's business key.

    fail_on_call makes the Nth upsert call (1-based) raise a database error.
    """

    def __init__(self, *, fail_on_call: int | None = None, fail_tables: Sequence[str] = ()) -> None:
        self.tables: dict[str, dict[tuple[Any, ...], dict[str, Any]]] = {}
        self.calls: list[tuple[str, int]] = []
        self._fail_on_call = fail_on_call
        self._fail_tables = set(fail_tables)

    def upsert(self, table_name: str, records: Sequence[Mapping[str, Any]]) -> UpsertCounts:
        self.calls.append((table_name, len(records)))
        if self._fail_on_call is not None and len(self.calls) == self._fail_on_call:
            raise OperationalError("INSERT", {}, Exception("connection reset"))
        if table_name in self._fail_tables:
            raise OperationalError("INSERT", {}, Exception(f"{table_name} unavailable"))

        key_columns = REPORT_MODELS[table_name].business_key
        table = self.tables.setdefault(table_name, {})
        inserted = updated = 0
        for record in records:
            key = tuple(record.get(column) for column in key_columns)
            if key in table:
                updated += 1
            else:
                inserted += 1
            table[key] = dict(record)
        return UpsertCounts(inserted=inserted, updated=updated)

    def delete_by_source_id(self, table_name: str, source_id: uuid.UUID) -> int:
        table = self.tables.get(table_name, {})
        doomed = [key for key, record in table.items() if record.get("data_source_id") == source_id]
        for key in doomed:
            del table[key]
        return len(doomed)

    def rows(self, table_name: str) -> list[dict[str, Any]]:
        return list(self.tables.get(table_name, {}).values())


class InMemorySessionTracker:
    """
    Tracker double that records every status transition.
    """

    def __init__(self) -> None:
        self.sessions: dict[uuid.UUID, UploadSessionSnapshot] = {}
        self.history: dict[uuid.UUID, list[str]] = {}
        self.log_entries: list[IngestionLogRecord] = []

    def create_upload_session(
        self,
        *,
        organization_id: uuid.UUID,
        client_id: uuid.UUID,
        user_id: uuid.UUID | None,
        report_type: str,
        file_name: str | None = None,
        file_size_bytes: int | None = None,
    ) -> UploadSessionSnapshot:
        snapshot = UploadSessionSnapshot(
            id=uuid.uuid4(),
            organization_id=organization_id,
            client_id=client_id,
            user_id=user_id,
            report_type=report_type,
            status="pending",
            file_name=file_name,
            file_size_bytes=file_size_bytes,
            created_at=datetime.now(timezone.utc),
        )
        self.sessions[snapshot.id] = snapshot
        self.history[snapshot.id] = ["pending"]
        return snapshot

    def _update(self, session_id: uuid.UUID, **changes: Any) -> UploadSessionSnapshot:
        snapshot = replace(self.sessions[session_id], **changes)
        self.sessions[session_id] = snapshot
        self.history[session_id].append(snapshot.status)
        return snapshot

    def mark_processing(self, session_id: uuid.UUID) -> UploadSessionSnapshot:
        return self._update(session_id, status="processing")

    def mark_completed(
        self,
        session_id: uuid.UUID,
        *,
        processed: int,
        inserted: int,
        updated: int = 0,
        skipped: int = 0,
    ) -> UploadSessionSnapshot:
        return self._update(
            session_id,
            status="completed",
            records_processed=processed,
            records_inserted=inserted,
            records_updated=updated,
            records_skipped=skipped,
            completed_at=datetime.now(timezone.utc),
        )

    def mark_failed(self, session_id: uuid.UUID, error_message: str) -> UploadSessionSnapshot:
        return self._update(
            session_id,
            status="failed",
            error_message=error_message,
            completed_at=datetime.now(timezone.utc),
        )

    def log_ingestion(
        self,
        *,
        organization_id: uuid.UUID,
        client_id: uuid.UUID,
        source_id: uuid.UUID | None,
        table_name: str,
        record_count: int,
        source_type: str = "manual_upload",
        operation: str = "upsert",
        date_range: DateRange | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> IngestionLogRecord:
        record = IngestionLogRecord(
            id=uuid.uuid4(),
            organization_id=organization_id,
            client_id=client_id,
            source_type=source_type,
            source_id=source_id,
            table_name=table_name,
            operation=operation,
            record_count=record_count,
            date_range_start=date.fromisoformat(date_range.start) if date_range else None,
            date_range_end=date.fromisoformat(date_range.end) if date_range else None,
            metadata=dict(metadata or {}),
            created_at=datetime.now(timezone.utc),
        )
        self.log_entries.append(record)
        return record

    def delete_ingestion_log(self, source_id: uuid.UUID) -> int:
        before = len(self.log_entries)
        self.log_entries = [entry for entry in self.log_entries if entry.source_id != source_id]
        return before - len(self.log_entries)

    def delete_upload_session(self, session_id: uuid.UUID) -> None:
        if self.sessions.pop(session_id, None) is None:
            raise UploadSessionNotFoundError(f"Upload session '{session_id}' was not found.")

    def get_upload_session(self, session_id: uuid.UUID) -> UploadSessionSnapshot | None:
        return self.sessions.get(session_id)

    def get_upload_history(
        self,
        organization_id: uuid.UUID,
        *,
        client_id: uuid.UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> UploadHistoryPage:
        matching = [
            snapshot
            for snapshot in reversed(list(self.sessions.values()))
            if snapshot.organization_id == organization_id
            and (client_id is None or snapshot.client_id == client_id)
        ]
        return UploadHistoryPage(sessions=matching[offset : offset + limit], total=len(matching))

    def get_ingestion_log(
        self,
        client_id: uuid.UUID,
        *,
        limit: int = 100,
        source_type: str | None = None,
    ) -> list[IngestionLogRecord]:
        entries = [
            entry
            for entry in reversed(self.log_entries)
            if entry.client_id == client_id and (source_type is None or entry.source_type == source_type)
        ]
        return entries[:limit]


def build_xlsx(sheets: Mapping[str, Sequence[Sequence[Any]]]) -> bytes:
    """
    Build a workbook with one sheet per entry; the first row is the header.
    """

    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        worksheet = workbook.create_sheet(title=name)
        for row in rows:
            worksheet.append(list(row))

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def xlsx_data_url(sheets: Mapping[str, Sequence[Sequence[Any]]]) -> str:
    encoded = base64.b64encode(build_xlsx(sheets)).decode("ascii")
    return (
        "data:application/vnd.openxmlformats-officedocument.spreadsheetml.sheet;base64,"
        + encoded
    )


@pytest.fixture()
def store() -> InMemoryReportDataStore:
    return InMemoryReportDataStore()


@pytest.fixture()
def tracker() -> InMemorySessionTracker:
    return InMemorySessionTracker()


@pytest.fixture()
def registry() -> ParserRegistry:
    return ParserRegistry(today=fixed_today)


@pytest.fixture()
def service(
    store: InMemoryReportDataStore,
    tracker: InMemorySessionTracker,
    registry: ParserRegistry,
) -> ReportIngestionService:
    return ReportIngestionService(
        store=store,
        tracker=tracker,
        registry=registry,
        chunk_size=500,
        max_errors_reported=100,
        today=fixed_today,
    )


@pytest.fixture()
def client_id() -> uuid.UUID:
    return uuid.UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture()
def organization_id() -> uuid.UUID:
    return uuid.UUID("22222222-2222-2222-2222-222222222222")
