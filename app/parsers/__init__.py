"""
Report parsers package exports.
"""

from app.parsers.base import BaseReportParser, DelimitedReportParser, ParseContext
from app.parsers.column_resolver import ColumnMap, ColumnResolver
from app.parsers.registry import (
    REPORT_TYPES,
    ParserRegistry,
    ReportTypeInfo,
    UnknownReportTypeError,
    get_parser_registry,
    is_valid_report_type,
)

__all__ = [
    "BaseReportParser",
    "ColumnMap",
    "ColumnResolver",
    "DelimitedReportParser",
    "ParseContext",
    "ParserRegistry",
    "REPORT_TYPES",
    "ReportTypeInfo",
    "UnknownReportTypeError",
    "get_parser_registry",
    "is_valid_report_type",
]
