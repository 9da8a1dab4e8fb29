"""
Repository package exports.
"""

from db.repositories.client_repository import ClientRepository
from db.repositories.errors import (
    ClientAccessError,
    ClientInactiveError,
    ClientNotFoundError,
    ReportPayloadError,
    ReportRepositoryError,
    UnknownReportTableError,
    UploadSessionNotFoundError,
)
from db.repositories.ingestion_log_repository import IngestionLogRepository
from db.repositories.report_data_repository import ReportDataRepository, UpsertCounts
from db.repositories.upload_session_repository import UploadSessionRepository

__all__ = [
    "ClientAccessError",
    "ClientInactiveError",
    "ClientNotFoundError",
    "ClientRepository",
    "ReportPayloadError",
    "IngestionLogRepository",
    "ReportDataRepository",
    "ReportRepositoryError",
    "UnknownReportTableError",
    "UploadSessionNotFoundError",
    "UploadSessionRepository",
    "UpsertCounts",
]
