"""
app/services package marker.
"""

from app.services.ingestion_session_tracker import (
    IngestionSessionTracker,
    UploadSessionStateError,
    get_ingestion_session_tracker,
)
from app.services.report_ingestion_service import (
    ReportIngestionError,
    ReportIngestionService,
    ReportPersistenceError,
    UploadResult,
    get_report_ingestion_service,
)

__all__ = [
    "IngestionSessionTracker",
    "UploadSessionStateError",
    "get_ingestion_session_tracker",
    "ReportIngestionError",
    "ReportIngestionService",
    "ReportPersistenceError",
    "UploadResult",
    "get_report_ingestion_service",
]
