"""
app/services/report_ingestion_service.py

Orchestrates one report upload end to end:

    1. create the upload session (pending) and mark it processing
    2. parse the content with the registered parser for the report type
    3. persist rows through the type's save strategy in chunked upserts
    4. append one ingestion log entry (best effort) and mark the session
       completed

Any failure after the session exists marks it failed before the exception
propagates, so no session is left in processing. Chunks commit one at a
time; a failing chunk stops the upload but earlier chunks stay written.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterator, Sequence
from dataclasses import asdict, dataclass, field
from datetime import date
from functools import lru_cache
from typing import Any, cast

from sqlalchemy.exc import SQLAlchemyError

from app.config import get_ingestion_settings
from app.domain.report_parsing import ParseError, ParseResult
from app.domain.report_rows import AdvertisingBulkRow
from app.logging_utils import log_event
from app.parsers.advertising_report import AdvertisingRatios
from app.parsers.base import BaseReportParser, SupportsDeduplicate, utc_today
from app.parsers.registry import ParserRegistry, UnknownReportTypeError, get_parser_registry
from app.services.ingestion_session_tracker import (
    UploadSessionTracker,
    get_ingestion_session_tracker,
)
from app.storage.base import ReportDataStore
from db.models.ingestion_log import DataSourceType, IngestionOperation
from db.repositories.errors import ReportRepositoryError
from db.repositories.report_data_repository import UpsertCounts

logger = logging.getLogger(__name__)

SKU_CAMPAIGN_TABLE = "sku_campaign_mapping"

_DEDUPLICATED_TYPES = frozenset({"product_performance", "parent_performance", "search_terms"})
_SUMMED_METRICS = ("impressions", "clicks", "spend", "sales", "orders", "units")


# ---------------------------------------------------------------------------
# Exceptions and results
# ---------------------------------------------------------------------------


class ReportIngestionError(RuntimeError):
    """
    Base error for report ingestion failures.
    """


class ReportPersistenceError(ReportIngestionError):
    """
    Raised when the row store rejects a batch.
    """


@dataclass(frozen=True)
class UploadResult:
    success: bool
    report_type: str
    inserted: int
    session_id: uuid.UUID
    updated: int | None = None
    skipped: int = 0
    errors: int = 0
    error_details: list[ParseError] = field(default_factory=list)


@dataclass(frozen=True)
class UploadDeletion:
    success: bool
    deleted_records: int


@dataclass(frozen=True)
class SideEffectResult:
    """
    Outcome of a best-effort step; the caller logs it and moves on.
    """

    ok: bool
    count: int = 0
    error: str | None = None


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------


def _chunked(records: Sequence[dict[str, Any]], size: int) -> Iterator[Sequence[dict[str, Any]]]:
    for start in range(0, len(records), size):
        yield records[start : start + size]


def aggregate_advertising_rows(rows: Sequence[AdvertisingBulkRow]) -> list[dict[str, Any]]:
    """
    Merge rows sharing (report_date, campaign_id, ad_group_id, keyword_id).

    Volume metrics are summed; the first row's descriptive fields are kept.
    Ratios are computed from the summed totals, never carried over.
    """

    merged: dict[tuple[str, str, str, str], dict[str, Any]] = {}
    for row in rows:
        key = (row.report_date, row.campaign_id, row.ad_group_id or "", row.keyword_id or "")
        existing = merged.get(key)
        if existing is None:
            record = asdict(row)
            record.pop("sku", None)
            record.pop("asin", None)
            record["ad_group_id"] = key[2]
            record["keyword_id"] = key[3]
            merged[key] = record
            continue
        for metric in _SUMMED_METRICS:
            existing[metric] += getattr(row, metric)

    for record in merged.values():
        ratios = AdvertisingRatios.from_totals(
            impressions=record["impressions"],
            clicks=record["clicks"],
            spend=record["spend"],
            sales=record["sales"],
            orders=record["orders"],
        )
        record.update(asdict(ratios))
    return list(merged.values())


def collect_sku_campaign_pairs(rows: Sequence[AdvertisingBulkRow]) -> list[dict[str, Any]]:
    """
    First (sku, campaign_id) pair observed wins.
    """

    pairs: dict[tuple[str, str], dict[str, Any]] = {}
    for row in rows:
        if not row.sku or not row.campaign_id:
            continue
        pairs.setdefault(
            (row.sku, row.campaign_id),
            {
                "sku": row.sku,
                "asin": row.asin or "",
                "campaign_id": row.campaign_id,
                "campaign_name": row.campaign_name,
            },
        )
    return list(pairs.values())


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReportIngestionService:
    """
    Parses uploaded reports and persists them idempotently per business key.
    """

    def __init__(
        self,
        *,
        store: ReportDataStore,
        tracker: UploadSessionTracker,
        registry: ParserRegistry,
        chunk_size: int = 500,
        max_errors_reported: int = 100,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self._store = store
        self._tracker = tracker
        self._registry = registry
        self._chunk_size = max(1, chunk_size)
        self._max_errors_reported = max(0, max_errors_reported)
        self._today = today

    def process_upload(
        self,
        *,
        client_id: uuid.UUID,
        organization_id: uuid.UUID,
        user_id: uuid.UUID | None,
        report_type: str,
        content: str,
        file_name: str | None = None,
        file_size_bytes: int | None = None,
    ) -> UploadResult:
        if not self._registry.is_valid_report_type(report_type):
            raise UnknownReportTypeError(
                f"Invalid report type '{report_type}'. "
                f"Valid types: {', '.join(self._registry.report_types())}."
            )

        upload = self._tracker.create_upload_session(
            organization_id=organization_id,
            client_id=client_id,
            user_id=user_id,
            report_type=report_type,
            file_name=file_name,
            file_size_bytes=file_size_bytes,
        )
        session_id = upload.id

        try:
            self._tracker.mark_processing(session_id)

            parser = self._registry.get_parser(report_type)
            parse_result = parser.parse(content, file_name)
            metadata = parse_result.metadata
            log_event(
                logger,
                logging.INFO,
                "report_parsed",
                session_id=session_id,
                report_type=report_type,
                total_rows=metadata.total_rows,
                parsed_rows=metadata.parsed_rows,
                errors=len(parse_result.errors),
            )

            if parse_result.is_empty:
                self._tracker.mark_completed(
                    session_id,
                    processed=metadata.total_rows,
                    inserted=0,
                    skipped=metadata.skipped_rows,
                )
                return self._build_result(report_type, session_id, parse_result, UpsertCounts())

            counts = self._save(
                report_type=report_type,
                parser=parser,
                rows=parse_result.data,
                client_id=client_id,
                session_id=session_id,
            )

            record_count = counts.inserted + counts.updated
            self._run_side_effect(
                "ingestion_log_write",
                lambda: self._write_ingestion_log(
                    organization_id=organization_id,
                    client_id=client_id,
                    session_id=session_id,
                    table_name=parser.get_target_store(),
                    record_count=record_count,
                    parse_result=parse_result,
                    report_type=report_type,
                    file_name=file_name,
                ),
                session_id=session_id,
            )
            self._tracker.mark_completed(
                session_id,
                processed=metadata.total_rows,
                inserted=counts.inserted,
                updated=counts.updated,
                skipped=metadata.skipped_rows,
            )
        except Exception as exc:
            self._record_failure(session_id, report_type, exc)
            raise

        log_event(
            logger,
            logging.INFO,
            "upload_completed",
            session_id=session_id,
            report_type=report_type,
            inserted=counts.inserted,
            updated=counts.updated,
            skipped=metadata.skipped_rows,
        )
        return self._build_result(report_type, session_id, parse_result, counts)

    def delete_upload(self, session_id: uuid.UUID, report_type: str) -> UploadDeletion:
        """
        Remove an upload's rows, its audit entries and then the session.

        Row and audit deletes are best effort; the session delete is not.
        """

        if self._registry.is_valid_report_type(report_type):
            table_name = self._registry.get_target_store(report_type)
            rows_deleted = self._run_side_effect(
                "report_rows_delete",
                lambda: self._store.delete_by_source_id(table_name, session_id),
                session_id=session_id,
                table_name=table_name,
            )
        else:
            rows_deleted = SideEffectResult(ok=False, error=f"Unknown report type '{report_type}'")
            log_event(
                logger,
                logging.WARNING,
                "side_effect_failed",
                step="report_rows_delete",
                error=rows_deleted.error,
                session_id=session_id,
            )
        self._run_side_effect(
            "ingestion_log_delete",
            lambda: self._tracker.delete_ingestion_log(session_id),
            session_id=session_id,
        )
        self._tracker.delete_upload_session(session_id)

        log_event(
            logger,
            logging.INFO,
            "upload_deleted",
            session_id=session_id,
            report_type=report_type,
            deleted_records=rows_deleted.count,
        )
        return UploadDeletion(success=True, deleted_records=rows_deleted.count)

    # ------------------------------------------------------------------
    # Save strategies
    # ------------------------------------------------------------------

    def _save(
        self,
        *,
        report_type: str,
        parser: BaseReportParser[Any],
        rows: list[Any],
        client_id: uuid.UUID,
        session_id: uuid.UUID,
    ) -> UpsertCounts:
        ownership = {
            "client_id": client_id,
            "data_source_type": DataSourceType.MANUAL_UPLOAD,
            "data_source_id": session_id,
        }
        table_name = parser.get_target_store()

        if report_type == "advertising_bulk":
            bulk_rows = cast(Sequence[AdvertisingBulkRow], rows)
            records = aggregate_advertising_rows(bulk_rows)
            logger.info(
                "Aggregated advertising bulk rows session_id=%s rows=%d unique=%d",
                session_id,
                len(bulk_rows),
                len(records),
            )
            counts = self._upsert_chunked(table_name, records, ownership, session_id)
            self._run_side_effect(
                "sku_campaign_mapping_write",
                lambda: self._write_sku_campaign_pairs(bulk_rows, ownership, session_id),
                session_id=session_id,
                table_name=SKU_CAMPAIGN_TABLE,
            )
            return counts

        if report_type in _DEDUPLICATED_TYPES:
            rows = cast(SupportsDeduplicate[Any], parser).deduplicate(rows)

        records = [asdict(row) for row in rows]
        if report_type == "inventory":
            snapshot_date = self._today().isoformat()
            for record in records:
                record["snapshot_date"] = snapshot_date
        elif report_type == "advertising_report":
            for record in records:
                record["ad_group_id"] = record.get("ad_group_id") or ""
                record["keyword_id"] = record.get("keyword_id") or ""

        return self._upsert_chunked(table_name, records, ownership, session_id)

    def _upsert_chunked(
        self,
        table_name: str,
        records: list[dict[str, Any]],
        ownership: dict[str, Any],
        session_id: uuid.UUID,
    ) -> UpsertCounts:
        total = UpsertCounts()
        for index, chunk in enumerate(_chunked(records, self._chunk_size)):
            payload = [{**ownership, **record} for record in chunk]
            try:
                counts = self._store.upsert(table_name, payload)
            except (SQLAlchemyError, ReportRepositoryError) as exc:
                raise ReportPersistenceError(
                    f"Database error writing {table_name} (chunk {index + 1}): {exc}"
                ) from exc

            total = total + counts
            log_event(
                logger,
                logging.DEBUG,
                "chunk_persisted",
                session_id=session_id,
                table_name=table_name,
                chunk=index + 1,
                size=len(payload),
                inserted=counts.inserted,
                updated=counts.updated,
            )
        return total

    def _write_sku_campaign_pairs(
        self,
        rows: Sequence[AdvertisingBulkRow],
        ownership: dict[str, Any],
        session_id: uuid.UUID,
    ) -> int:
        pairs = collect_sku_campaign_pairs(rows)
        if not pairs:
            return 0
        counts = self._upsert_chunked(SKU_CAMPAIGN_TABLE, pairs, ownership, session_id)
        return counts.inserted + counts.updated

    def _write_ingestion_log(
        self,
        *,
        organization_id: uuid.UUID,
        client_id: uuid.UUID,
        session_id: uuid.UUID,
        table_name: str,
        record_count: int,
        parse_result: ParseResult[Any],
        report_type: str,
        file_name: str | None,
    ) -> int:
        metadata = parse_result.metadata
        self._tracker.log_ingestion(
            organization_id=organization_id,
            client_id=client_id,
            source_type=DataSourceType.MANUAL_UPLOAD,
            source_id=session_id,
            table_name=table_name,
            operation=IngestionOperation.UPSERT,
            record_count=record_count,
            date_range=metadata.date_range,
            metadata={
                "report_type": report_type,
                "file_name": file_name,
                "parsed_rows": metadata.parsed_rows,
                "parse_errors": len(parse_result.errors),
            },
        )
        return 1

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _run_side_effect(
        self,
        name: str,
        step: Callable[[], int],
        **fields: Any,
    ) -> SideEffectResult:
        try:
            result = SideEffectResult(ok=True, count=step())
        except Exception as exc:  # noqa: BLE001
            result = SideEffectResult(ok=False, error=str(exc))
            log_event(logger, logging.WARNING, "side_effect_failed", step=name, error=str(exc), **fields)
        return result

    def _record_failure(self, session_id: uuid.UUID, report_type: str, exc: Exception) -> None:
        message = str(exc) or exc.__class__.__name__
        log_event(
            logger,
            logging.ERROR,
            "upload_failed",
            session_id=session_id,
            report_type=report_type,
            error=message,
        )
        try:
            self._tracker.mark_failed(session_id, message)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to mark upload session failed session_id=%s", session_id)

    def _build_result(
        self,
        report_type: str,
        session_id: uuid.UUID,
        parse_result: ParseResult[Any],
        counts: UpsertCounts,
    ) -> UploadResult:
        return UploadResult(
            success=True,
            report_type=report_type,
            inserted=counts.inserted,
            updated=counts.updated,
            skipped=parse_result.metadata.skipped_rows,
            errors=len(parse_result.errors),
            error_details=parse_result.errors[: self._max_errors_reported],
            session_id=session_id,
        )


@lru_cache(maxsize=1)
def get_report_ingestion_service() -> ReportIngestionService:
    from app.storage.sqlalchemy_store import SQLAlchemyReportDataStore

    settings = get_ingestion_settings()
    return ReportIngestionService(
        store=SQLAlchemyReportDataStore(),
        tracker=get_ingestion_session_tracker(),
        registry=get_parser_registry(),
        chunk_size=settings.upsert_chunk_size,
        max_errors_reported=settings.max_parse_errors_reported,
    )
