"""
Repository for upload session lifecycle persistence and history lookup.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Select, delete, func, select
from sqlalchemy.orm import Session

from db.models.client import Client
from db.models.upload_session import UploadSession, UploadSessionStatus


class UploadSessionRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_session(
        self,
        *,
        organization_id: uuid.UUID,
        client_id: uuid.UUID,
        user_id: uuid.UUID | None,
        report_type: str,
        file_name: str | None,
        file_size_bytes: int | None,
    ) -> UploadSession:
        upload = UploadSession(
            organization_id=organization_id,
            client_id=client_id,
            user_id=user_id,
            report_type=report_type,
            file_name=file_name,
            file_size_bytes=file_size_bytes,
            status=UploadSessionStatus.PENDING,
            started_at=datetime.now(timezone.utc),
        )
        self._session.add(upload)
        self._session.flush()
        self._session.refresh(upload)
        return upload

    def get_session(self, session_id: uuid.UUID) -> UploadSession | None:
        return self._session.get(UploadSession, session_id)

    def update_status(
        self,
        *,
        session_id: uuid.UUID,
        status: str,
        records_processed: int | None = None,
        records_inserted: int | None = None,
        records_updated: int | None = None,
        records_skipped: int | None = None,
        error_message: str | None = None,
    ) -> UploadSession | None:
        upload = self.get_session(session_id)
        if upload is None:
            return None

        upload.status = status
        if records_processed is not None:
            upload.records_processed = records_processed
        if records_inserted is not None:
            upload.records_inserted = records_inserted
        if records_updated is not None:
            upload.records_updated = records_updated
        if records_skipped is not None:
            upload.records_skipped = records_skipped
        if error_message is not None:
            upload.error_message = error_message
        if status in UploadSessionStatus.TERMINAL:
            upload.completed_at = datetime.now(timezone.utc)
        return upload

    def list_for_organization(
        self,
        *,
        organization_id: uuid.UUID,
        client_id: uuid.UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[tuple[UploadSession, str | None]], int]:
        """
        Return (session, client name) pairs newest first, plus the unpaged total.
        """

        stmt: Select[tuple[UploadSession, str | None]] = (
            select(UploadSession, Client.name)
            .outerjoin(Client, Client.id == UploadSession.client_id)
            .where(UploadSession.organization_id == organization_id)
        )
        count_stmt = select(func.count(UploadSession.id)).where(
            UploadSession.organization_id == organization_id
        )
        if client_id is not None:
            stmt = stmt.where(UploadSession.client_id == client_id)
            count_stmt = count_stmt.where(UploadSession.client_id == client_id)

        stmt = (
            stmt.order_by(UploadSession.created_at.desc())
            .offset(max(0, offset))
            .limit(max(1, limit))
        )
        rows = [(row[0], row[1]) for row in self._session.execute(stmt).all()]
        total = int(self._session.scalar(count_stmt) or 0)
        return rows, total

    def delete_session(self, session_id: uuid.UUID) -> int:
        result = self._session.execute(delete(UploadSession).where(UploadSession.id == session_id))
        return int(result.rowcount or 0)
