"""
Repository for report data upserts and session-scoped deletes.
"""

from __future__ import annotations

import datetime
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Date, delete, func, literal_column
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from db.models import REPORT_MODELS
from db.repositories.errors import ReportPayloadError, UnknownReportTableError


@dataclass(frozen=True)
class UpsertCounts:
    inserted: int = 0
    updated: int = 0

    def __add__(self, other: "UpsertCounts") -> "UpsertCounts":
        return UpsertCounts(
            inserted=self.inserted + other.inserted,
            updated=self.updated + other.updated,
        )


def resolve_report_model(table_name: str) -> Any:
    model = REPORT_MODELS.get(table_name)
    if model is None:
        raise UnknownReportTableError(
            f"Unknown report table '{table_name}'. Known tables: {', '.join(sorted(REPORT_MODELS))}."
        )
    return model


class ReportDataRepository:
    """
    PostgreSQL INSERT ... ON CONFLICT DO UPDATE keyed on each table's
    business key. Transaction control is left to the caller.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(self, table_name: str, records: Sequence[Mapping[str, Any]]) -> UpsertCounts:
        if not records:
            return UpsertCounts()

        model = resolve_report_model(table_name)
        payloads = self._deduplicate_payloads(
            [self._coerce_payload(model, record) for record in records],
            key_columns=model.business_key,
        )

        stmt = self.build_upsert_statement(model, payloads)
        flags = list(self._session.scalars(stmt).all())
        inserted = sum(1 for flag in flags if flag)
        return UpsertCounts(inserted=inserted, updated=len(flags) - inserted)

    @staticmethod
    def build_upsert_statement(model: Any, payloads: Sequence[Mapping[str, Any]]) -> Any:
        """
        INSERT the payloads; on a business-key conflict overwrite only the
        columns the payloads carry.

        Columns a caller leaves out keep their stored values, so a partial
        record (e.g. a SKU/campaign pair without targeting details) never
        blanks what a fuller report wrote earlier.
        """

        supplied = {name for payload in payloads for name in payload}
        protected = set(model.business_key) | {"id", "created_at", "updated_at"}

        stmt = insert(model).values(list(payloads))
        updatable: dict[str, Any] = {
            column.name: stmt.excluded[column.name]
            for column in model.__table__.columns
            if column.name in supplied and column.name not in protected
        }
        if "updated_at" in model.__table__.columns:
            updatable["updated_at"] = func.now()

        return stmt.on_conflict_do_update(
            index_elements=list(model.business_key),
            set_=updatable,
        ).returning(literal_column("(xmax = 0)").label("inserted"))

    def delete_by_source_id(self, table_name: str, source_id: uuid.UUID) -> int:
        model = resolve_report_model(table_name)
        stmt = delete(model).where(model.data_source_id == source_id)
        result = self._session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    def _coerce_payload(model: Any, record: Mapping[str, Any]) -> dict[str, Any]:
        payload = dict(record)
        for column in model.__table__.columns:
            value = payload.get(column.name)
            if not (isinstance(column.type, Date) and isinstance(value, str)):
                continue
            if not value:
                payload[column.name] = None
                continue
            try:
                payload[column.name] = datetime.date.fromisoformat(value)
            except ValueError as exc:
                raise ReportPayloadError(
                    f"Invalid date for {model.__tablename__}.{column.name}: {value!r}"
                ) from exc
        return payload

    @staticmethod
    def _deduplicate_payloads(
        payloads: Sequence[dict[str, Any]],
        *,
        key_columns: Sequence[str],
    ) -> list[dict[str, Any]]:
        """
        Keep the last payload per business key.

        One statement may not touch the same conflict target twice.
        """

        deduped: dict[tuple[Any, ...], dict[str, Any]] = {}
        for payload in payloads:
            key = tuple(payload.get(column) for column in key_columns)
            deduped.pop(key, None)
            deduped[key] = payload
        return list(deduped.values())
