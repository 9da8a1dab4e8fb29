"""
Report data storage interfaces and implementations.
"""

from app.storage.base import ReportDataStore
from app.storage.sqlalchemy_store import SQLAlchemyReportDataStore

__all__ = ["ReportDataStore", "SQLAlchemyReportDataStore"]
