"""
Repository-layer exceptions for report ingestion flows.
"""

from __future__ import annotations


class ReportRepositoryError(Exception):
    """Base exception for report repository failures."""


class ClientNotFoundError(ReportRepositoryError):
    """Raised when a referenced client does not exist."""


class ClientAccessError(ReportRepositoryError):
    """Raised when a client belongs to a different organization."""


class ClientInactiveError(ReportRepositoryError):
    """Raised when a referenced client is not active."""


class UploadSessionNotFoundError(ReportRepositoryError, LookupError):
    """Raised when an upload session id does not resolve."""


class UnknownReportTableError(ReportRepositoryError, ValueError):
    """Raised when a table name is not a registered report table."""


class ReportPayloadError(ReportRepositoryError, ValueError):
    """Raised when a record value cannot be converted to its column type."""
