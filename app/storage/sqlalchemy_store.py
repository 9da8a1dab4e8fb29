"""
SQLAlchemy-backed report data store.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.storage.base import ReportDataStore
from db.repositories.report_data_repository import ReportDataRepository, UpsertCounts


class SQLAlchemyReportDataStore(ReportDataStore):
    """
    Runs each batch in a short-lived session that commits on success.
    """

    def __init__(self, *, session_factory: Callable[[], Session] | None = None) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory

    def upsert(self, table_name: str, records: Sequence[Mapping[str, Any]]) -> UpsertCounts:
        if not records:
            return UpsertCounts()

        with self._session_factory() as session:
            try:
                counts = ReportDataRepository(session).upsert(table_name, records)
                session.commit()
                return counts
            except SQLAlchemyError:
                session.rollback()
                raise

    def delete_by_source_id(self, table_name: str, source_id: uuid.UUID) -> int:
        with self._session_factory() as session:
            try:
                deleted = ReportDataRepository(session).delete_by_source_id(table_name, source_id)
                session.commit()
                return deleted
            except SQLAlchemyError:
                session.rollback()
                raise
