"""
Storage layer interface for parsed report data.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from db.repositories.report_data_repository import UpsertCounts


class ReportDataStore(ABC):
    """
    Row store addressed by table name and each table's business key.
    """

    @abstractmethod
    def upsert(self, table_name: str, records: Sequence[Mapping[str, Any]]) -> UpsertCounts:
        """
        Upsert one batch atomically and return inserted/updated counts.

        Each call is its own unit of work: a later failing batch does not
        undo an earlier one.
        """

    @abstractmethod
    def delete_by_source_id(self, table_name: str, source_id: uuid.UUID) -> int:
        """
        Delete every row written by the given upload session; return the count.
        """
