"""
app/api/routers/uploads.py

Report upload HTTP endpoints.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import (
    ClientAccessCheck,
    RequestIdentity,
    get_client_access_check,
    get_request_identity,
    require_decoded_upload,
)
from app.config import UploadSettings, get_upload_settings
from app.domain.upload_session import IngestionLogRecord, UploadSessionSnapshot
from app.parsers.registry import ParserRegistry, UnknownReportTypeError, get_parser_registry
from app.schemas.uploads import (
    IngestionLogEntryResponse,
    ParseErrorResponse,
    ReportTypeResponse,
    UploadDeleteResponse,
    UploadHistoryResponse,
    UploadRequest,
    UploadResponse,
    UploadSessionResponse,
)
from app.services.ingestion_session_tracker import (
    IngestionSessionTracker,
    UploadSessionStateError,
    get_ingestion_session_tracker,
)
from app.services.report_ingestion_service import (
    ReportIngestionError,
    ReportIngestionService,
    get_report_ingestion_service,
)
from db.repositories.errors import (
    ClientAccessError,
    ClientInactiveError,
    ClientNotFoundError,
    UploadSessionNotFoundError,
)

router = APIRouter(prefix="/api/uploads", tags=["uploads"])


def _session_response(snapshot: UploadSessionSnapshot) -> UploadSessionResponse:
    return UploadSessionResponse(
        id=snapshot.id,
        client_id=snapshot.client_id,
        client_name=snapshot.client_name,
        report_type=snapshot.report_type,
        file_name=snapshot.file_name,
        status=snapshot.status,
        records_processed=snapshot.records_processed,
        records_inserted=snapshot.records_inserted,
        records_updated=snapshot.records_updated,
        records_skipped=snapshot.records_skipped,
        error_message=snapshot.error_message,
        created_at=snapshot.created_at,
        completed_at=snapshot.completed_at,
    )


def _log_response(record: IngestionLogRecord) -> IngestionLogEntryResponse:
    return IngestionLogEntryResponse(
        id=record.id,
        client_id=record.client_id,
        source_type=record.source_type,
        source_id=record.source_id,
        table_name=record.table_name,
        operation=record.operation,
        record_count=record.record_count,
        date_range_start=record.date_range_start,
        date_range_end=record.date_range_end,
        metadata=record.metadata,
        created_at=record.created_at,
    )


def _ensure_client_access(
    check: ClientAccessCheck,
    client_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> None:
    try:
        check(client_id, organization_id)
    except ClientNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ClientAccessError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except ClientInactiveError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("", response_model=UploadResponse)
def upload_report(
    body: UploadRequest,
    identity: RequestIdentity = Depends(get_request_identity),
    check_client_access: ClientAccessCheck = Depends(get_client_access_check),
    registry: ParserRegistry = Depends(get_parser_registry),
    settings: UploadSettings = Depends(get_upload_settings),
    ingestion_service: ReportIngestionService = Depends(get_report_ingestion_service),
) -> UploadResponse:
    """
    Parse and persist one report file for a client.

    The report type and client are validated before any upload session is created.
    """

    if not registry.is_valid_report_type(body.report_type):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Invalid report type '{body.report_type}'. "
                f"Valid types: {', '.join(registry.report_types())}."
            ),
        )
    _ensure_client_access(check_client_access, body.client_id, identity.organization_id)
    decoded = require_decoded_upload(body.content, body.file_name, settings)

    try:
        result = ingestion_service.process_upload(
            client_id=body.client_id,
            organization_id=identity.organization_id,
            user_id=identity.user_id,
            report_type=body.report_type,
            content=decoded.content,
            file_name=body.file_name,
            file_size_bytes=decoded.size_bytes,
        )
    except UnknownReportTypeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (ReportIngestionError, UploadSessionStateError) as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    return UploadResponse(
        success=result.success,
        report_type=result.report_type,
        inserted=result.inserted,
        updated=result.updated,
        skipped=result.skipped,
        errors=result.errors,
        error_details=[
            ParseErrorResponse(
                row=error.row_number,
                message=error.message,
                field=error.field,
                raw_value=error.raw_value,
            )
            for error in result.error_details
        ],
        session_id=result.session_id,
    )


@router.get("/history", response_model=UploadHistoryResponse)
def get_upload_history(
    client_id: uuid.UUID | None = Query(default=None, alias="clientId"),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    identity: RequestIdentity = Depends(get_request_identity),
    tracker: IngestionSessionTracker = Depends(get_ingestion_session_tracker),
) -> UploadHistoryResponse:
    page = tracker.get_upload_history(
        identity.organization_id,
        client_id=client_id,
        limit=limit,
        offset=offset,
    )
    return UploadHistoryResponse(
        sessions=[_session_response(snapshot) for snapshot in page.sessions],
        total=page.total,
    )


@router.get("/report-types", response_model=list[ReportTypeResponse])
def list_report_types(
    registry: ParserRegistry = Depends(get_parser_registry),
) -> list[ReportTypeResponse]:
    return [
        ReportTypeResponse(
            type=info.type,
            label=info.label,
            description=info.description,
            file_hint=info.file_hint,
            table_name=info.table_name,
        )
        for info in registry.get_all_report_type_info()
    ]


@router.get("/ingestion-log/{client_id}", response_model=list[IngestionLogEntryResponse])
def get_ingestion_log(
    client_id: uuid.UUID,
    limit: int = Query(default=100, ge=1, le=1000),
    source_type: str | None = Query(default=None, alias="sourceType"),
    identity: RequestIdentity = Depends(get_request_identity),
    check_client_access: ClientAccessCheck = Depends(get_client_access_check),
    tracker: IngestionSessionTracker = Depends(get_ingestion_session_tracker),
) -> list[IngestionLogEntryResponse]:
    _ensure_client_access(check_client_access, client_id, identity.organization_id)
    records = tracker.get_ingestion_log(client_id, limit=limit, source_type=source_type)
    return [_log_response(record) for record in records]


@router.delete("/{session_id}", response_model=UploadDeleteResponse)
def delete_upload(
    session_id: uuid.UUID,
    identity: RequestIdentity = Depends(get_request_identity),
    tracker: IngestionSessionTracker = Depends(get_ingestion_session_tracker),
    ingestion_service: ReportIngestionService = Depends(get_report_ingestion_service),
) -> UploadDeleteResponse:
    """
    Delete an upload session together with the rows it wrote.
    """

    snapshot = tracker.get_upload_session(session_id)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Upload session '{session_id}' was not found.",
        )
    if snapshot.organization_id != identity.organization_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Upload session belongs to a different organization.",
        )

    try:
        deletion = ingestion_service.delete_upload(session_id, snapshot.report_type)
    except UploadSessionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return UploadDeleteResponse(success=deletion.success, deleted_records=deletion.deleted_records)
