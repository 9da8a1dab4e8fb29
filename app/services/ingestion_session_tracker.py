"""
app/services/ingestion_session_tracker.py

Durable upload session state machine and ingestion audit log.

    pending --mark_processing--> processing --mark_completed--> completed
                                     |
                                     +------mark_failed------> failed

completed and failed are terminal. mark_failed is also accepted from
pending so a failure before processing starts still lands in a terminal
state. Every transition commits in its own transaction.
"""

from __future__ import annotations

import datetime as dt
import logging
import uuid
from collections.abc import Callable
from functools import lru_cache
from typing import Any, Protocol

from sqlalchemy.orm import Session

from app.domain.report_parsing import DateRange
from app.domain.upload_session import IngestionLogRecord, UploadHistoryPage, UploadSessionSnapshot
from app.logging_utils import log_event
from db.models.ingestion_log import DataSourceType, IngestionLogEntry, IngestionOperation
from db.models.upload_session import UploadSession, UploadSessionStatus
from db.repositories.errors import UploadSessionNotFoundError
from db.repositories.ingestion_log_repository import IngestionLogRepository
from db.repositories.upload_session_repository import UploadSessionRepository

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50
DEFAULT_LOG_LIMIT = 100

_ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    UploadSessionStatus.PROCESSING: frozenset({UploadSessionStatus.PENDING}),
    UploadSessionStatus.COMPLETED: frozenset({UploadSessionStatus.PROCESSING}),
    UploadSessionStatus.FAILED: frozenset(
        {UploadSessionStatus.PENDING, UploadSessionStatus.PROCESSING}
    ),
}


class UploadSessionStateError(RuntimeError):
    """
    Raised on a transition the state machine does not allow.
    """


class UploadSessionTracker(Protocol):
    """
    Lifecycle operations the ingestion service depends on.
    """

    def create_upload_session(
        self,
        *,
        organization_id: uuid.UUID,
        client_id: uuid.UUID,
        user_id: uuid.UUID | None,
        report_type: str,
        file_name: str | None = None,
        file_size_bytes: int | None = None,
    ) -> UploadSessionSnapshot: ...

    def mark_processing(self, session_id: uuid.UUID) -> UploadSessionSnapshot: ...

    def mark_completed(
        self,
        session_id: uuid.UUID,
        *,
        processed: int,
        inserted: int,
        updated: int = 0,
        skipped: int = 0,
    ) -> UploadSessionSnapshot: ...

    def mark_failed(self, session_id: uuid.UUID, error_message: str) -> UploadSessionSnapshot: ...

    def log_ingestion(
        self,
        *,
        organization_id: uuid.UUID,
        client_id: uuid.UUID,
        source_id: uuid.UUID | None,
        table_name: str,
        record_count: int,
        source_type: str = ...,
        operation: str = ...,
        date_range: DateRange | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> IngestionLogRecord: ...

    def delete_ingestion_log(self, source_id: uuid.UUID) -> int: ...

    def delete_upload_session(self, session_id: uuid.UUID) -> None: ...


def snapshot_upload_session(
    upload: UploadSession,
    *,
    client_name: str | None = None,
) -> UploadSessionSnapshot:
    return UploadSessionSnapshot(
        id=upload.id,
        organization_id=upload.organization_id,
        client_id=upload.client_id,
        report_type=upload.report_type,
        status=upload.status,
        file_name=upload.file_name,
        file_size_bytes=upload.file_size_bytes,
        user_id=upload.user_id,
        client_name=client_name,
        records_processed=upload.records_processed or 0,
        records_inserted=upload.records_inserted or 0,
        records_updated=upload.records_updated or 0,
        records_skipped=upload.records_skipped or 0,
        error_message=upload.error_message,
        created_at=upload.created_at,
        started_at=upload.started_at,
        completed_at=upload.completed_at,
    )


def snapshot_log_entry(entry: IngestionLogEntry) -> IngestionLogRecord:
    return IngestionLogRecord(
        id=entry.id,
        organization_id=entry.organization_id,
        client_id=entry.client_id,
        source_type=entry.source_type,
        source_id=entry.source_id,
        table_name=entry.table_name,
        operation=entry.operation,
        record_count=entry.record_count,
        date_range_start=entry.date_range_start,
        date_range_end=entry.date_range_end,
        metadata=dict(entry.metadata_json or {}),
        created_at=entry.created_at,
    )


def _as_date(value: str | None) -> dt.date | None:
    if not value:
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        logger.warning("Ignoring non-ISO date in ingestion log range value=%r", value)
        return None


class IngestionSessionTracker:
    """
    Upload session lifecycle and audit log backed by SQLAlchemy.
    """

    def __init__(self, *, session_factory: Callable[[], Session] | None = None) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

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
        with self._session_factory() as session:
            with session.begin():
                upload = UploadSessionRepository(session).create_session(
                    organization_id=organization_id,
                    client_id=client_id,
                    user_id=user_id,
                    report_type=report_type,
                    file_name=file_name,
                    file_size_bytes=file_size_bytes,
                )
                snapshot = snapshot_upload_session(upload)

        log_event(
            logger,
            logging.INFO,
            "upload_session_created",
            session_id=snapshot.id,
            client_id=client_id,
            report_type=report_type,
            file_name=file_name,
        )
        return snapshot

    def mark_processing(self, session_id: uuid.UUID) -> UploadSessionSnapshot:
        return self._transition(session_id, UploadSessionStatus.PROCESSING)

    def mark_completed(
        self,
        session_id: uuid.UUID,
        *,
        processed: int,
        inserted: int,
        updated: int = 0,
        skipped: int = 0,
    ) -> UploadSessionSnapshot:
        return self._transition(
            session_id,
            UploadSessionStatus.COMPLETED,
            records_processed=processed,
            records_inserted=inserted,
            records_updated=updated,
            records_skipped=skipped,
        )

    def mark_failed(self, session_id: uuid.UUID, error_message: str) -> UploadSessionSnapshot:
        return self._transition(
            session_id,
            UploadSessionStatus.FAILED,
            error_message=error_message or "Unknown error",
        )

    def _transition(
        self,
        session_id: uuid.UUID,
        status: str,
        **fields: Any,
    ) -> UploadSessionSnapshot:
        with self._session_factory() as session:
            with session.begin():
                repository = UploadSessionRepository(session)
                upload = repository.get_session(session_id)
                if upload is None:
                    raise UploadSessionNotFoundError(f"Upload session '{session_id}' was not found.")
                if upload.status not in _ALLOWED_TRANSITIONS[status]:
                    raise UploadSessionStateError(
                        f"Upload session '{session_id}' cannot move from "
                        f"'{upload.status}' to '{status}'."
                    )
                repository.update_status(session_id=session_id, status=status, **fields)
                snapshot = snapshot_upload_session(upload)

        log_event(
            logger,
            logging.INFO,
            "upload_session_status_changed",
            session_id=session_id,
            status=status,
            **{key: value for key, value in fields.items() if value is not None},
        )
        return snapshot

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------

    def log_ingestion(
        self,
        *,
        organization_id: uuid.UUID,
        client_id: uuid.UUID,
        source_id: uuid.UUID | None,
        table_name: str,
        record_count: int,
        source_type: str = DataSourceType.MANUAL_UPLOAD,
        operation: str = IngestionOperation.UPSERT,
        date_range: DateRange | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> IngestionLogRecord:
        with self._session_factory() as session:
            with session.begin():
                entry = IngestionLogRepository(session).create_entry(
                    organization_id=organization_id,
                    client_id=client_id,
                    source_type=source_type,
                    source_id=source_id,
                    table_name=table_name,
                    operation=operation,
                    record_count=record_count,
                    date_range_start=_as_date(date_range.start) if date_range else None,
                    date_range_end=_as_date(date_range.end) if date_range else None,
                    metadata=metadata,
                )
                record = snapshot_log_entry(entry)
        return record

    def delete_ingestion_log(self, source_id: uuid.UUID) -> int:
        with self._session_factory() as session:
            with session.begin():
                return IngestionLogRepository(session).delete_by_source_id(source_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_upload_session(self, session_id: uuid.UUID) -> UploadSessionSnapshot | None:
        with self._session_factory() as session:
            upload = UploadSessionRepository(session).get_session(session_id)
            return snapshot_upload_session(upload) if upload is not None else None

    def delete_upload_session(self, session_id: uuid.UUID) -> None:
        with self._session_factory() as session:
            with session.begin():
                deleted = UploadSessionRepository(session).delete_session(session_id)
        if deleted == 0:
            raise UploadSessionNotFoundError(f"Upload session '{session_id}' was not found.")

    def get_upload_history(
        self,
        organization_id: uuid.UUID,
        *,
        client_id: uuid.UUID | None = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
    ) -> UploadHistoryPage:
        with self._session_factory() as session:
            rows, total = UploadSessionRepository(session).list_for_organization(
                organization_id=organization_id,
                client_id=client_id,
                limit=limit,
                offset=offset,
            )
            sessions = [
                snapshot_upload_session(upload, client_name=client_name)
                for upload, client_name in rows
            ]
        return UploadHistoryPage(sessions=sessions, total=total)

    def get_ingestion_log(
        self,
        client_id: uuid.UUID,
        *,
        limit: int = DEFAULT_LOG_LIMIT,
        source_type: str | None = None,
    ) -> list[IngestionLogRecord]:
        with self._session_factory() as session:
            entries = IngestionLogRepository(session).list_for_client(
                client_id=client_id,
                limit=limit,
                source_type=source_type,
            )
            return [snapshot_log_entry(entry) for entry in entries]


@lru_cache(maxsize=1)
def get_ingestion_session_tracker() -> IngestionSessionTracker:
    return IngestionSessionTracker()
