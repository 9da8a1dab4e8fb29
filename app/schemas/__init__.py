"""
app/schemas package marker.
"""

from app.schemas.uploads import (
    IngestionLogEntryResponse,
    ReportTypeResponse,
    UploadDeleteResponse,
    UploadHistoryResponse,
    UploadRequest,
    UploadResponse,
    UploadSessionResponse,
)

__all__ = [
    "IngestionLogEntryResponse",
    "ReportTypeResponse",
    "UploadDeleteResponse",
    "UploadHistoryResponse",
    "UploadRequest",
    "UploadResponse",
    "UploadSessionResponse",
]
