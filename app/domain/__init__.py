"""
app/domain package marker.
"""

from app.domain.report_parsing import DateRange, ParseError, ParseMetadata, ParseResult
from app.domain.upload_session import IngestionLogRecord, UploadHistoryPage, UploadSessionSnapshot

__all__ = [
    "DateRange",
    "IngestionLogRecord",
    "ParseError",
    "ParseMetadata",
    "ParseResult",
    "UploadHistoryPage",
    "UploadSessionSnapshot",
]
