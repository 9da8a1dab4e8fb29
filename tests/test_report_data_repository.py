"""
tests/test_report_data_repository.py

Upsert statement shape and payload handling, compiled against the
PostgreSQL dialect with no database.
"""

from __future__ import annotations

import datetime
import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from db.models import DailySalesTraffic, SkuCampaignMapping, SkuRanking
from db.repositories.errors import ReportPayloadError, UnknownReportTableError
from db.repositories.report_data_repository import ReportDataRepository, UpsertCounts

CLIENT_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
SESSION_ID = uuid.UUID("33333333-3333-3333-3333-333333333333")


def compile_sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def set_assignments(sql: str) -> dict[str, str]:
    clause = sql.split("DO UPDATE SET", 1)[1].split("RETURNING", 1)[0]
    assignments = {}
    for part in clause.split(","):
        name, _, value = part.partition("=")
        assignments[name.strip()] = value.strip()
    return assignments


def sku_pair(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "client_id": CLIENT_ID,
        "data_source_type": "manual_upload",
        "data_source_id": SESSION_ID,
        "sku": "SKU-1",
        "asin": "B001",
        "campaign_id": "C-1",
        "campaign_name": "Brand Defense",
    }
    payload.update(overrides)
    return payload


def test_conflict_update_only_touches_supplied_columns() -> None:
    sql = compile_sql(ReportDataRepository.build_upsert_statement(SkuCampaignMapping, [sku_pair()]))
    assignments = set_assignments(sql)

    assert "ON CONFLICT (client_id, sku, campaign_id)" in sql
    assert assignments["asin"] == "excluded.asin"
    assert assignments["campaign_name"] == "excluded.campaign_name"
    assert assignments["data_source_id"] == "excluded.data_source_id"
    for untouched in ("campaign_type", "targeting_type", "ad_group_id", "ad_group_name"):
        assert untouched not in assignments


def test_conflict_update_never_rewrites_key_or_identity_columns() -> None:
    payload = {
        "client_id": CLIENT_ID,
        "data_source_id": SESSION_ID,
        "date": datetime.date(2025, 1, 1),
        "ordered_product_sales": 10.0,
        "units_ordered": 2,
    }

    assignments = set_assignments(
        compile_sql(ReportDataRepository.build_upsert_statement(DailySalesTraffic, [payload]))
    )

    assert set(assignments) == {"data_source_id", "ordered_product_sales", "units_ordered", "updated_at"}
    assert assignments["updated_at"] == "now()"


def test_statement_reports_insert_or_update_per_row() -> None:
    sql = compile_sql(ReportDataRepository.build_upsert_statement(SkuCampaignMapping, [sku_pair()]))

    assert sql.rstrip().endswith("RETURNING (xmax = 0) AS inserted")


def test_upsert_splits_inserted_and_updated_counts() -> None:
    session = MagicMock()
    session.scalars.return_value.all.return_value = [True, False, True]

    counts = ReportDataRepository(session).upsert(
        "sku_campaign_mapping",
        [sku_pair(sku="A"), sku_pair(sku="B"), sku_pair(sku="C")],
    )

    assert counts == UpsertCounts(inserted=2, updated=1)
    session.scalars.assert_called_once()


def test_upsert_without_records_skips_the_database() -> None:
    session = MagicMock()

    assert ReportDataRepository(session).upsert("daily_sales_traffic", []) == UpsertCounts()
    session.scalars.assert_not_called()


def test_upsert_rejects_unknown_table() -> None:
    with pytest.raises(UnknownReportTableError, match="weekly_rollup"):
        ReportDataRepository(MagicMock()).upsert("weekly_rollup", [{"client_id": CLIENT_ID}])


def test_duplicate_business_keys_keep_the_last_payload() -> None:
    payloads = [
        {"client_id": CLIENT_ID, "date": "2025-01-01", "units_ordered": 1},
        {"client_id": CLIENT_ID, "date": "2025-01-02", "units_ordered": 5},
        {"client_id": CLIENT_ID, "date": "2025-01-01", "units_ordered": 9},
    ]

    deduped = ReportDataRepository._deduplicate_payloads(payloads, key_columns=("client_id", "date"))

    assert [(row["date"], row["units_ordered"]) for row in deduped] == [
        ("2025-01-02", 5),
        ("2025-01-01", 9),
    ]


def test_date_columns_are_converted() -> None:
    payload = ReportDataRepository._coerce_payload(
        SkuRanking,
        {"client_id": CLIENT_ID, "asin": "B001", "snapshot_date": "2024-01-05"},
    )

    assert payload["snapshot_date"] == datetime.date(2024, 1, 5)
    assert payload["asin"] == "B001"


def test_blank_date_becomes_null() -> None:
    payload = ReportDataRepository._coerce_payload(SkuRanking, {"asin": "B001", "snapshot_date": ""})

    assert payload["snapshot_date"] is None


def test_malformed_date_raises_repository_error() -> None:
    with pytest.raises(ReportPayloadError, match="sku_rankings.snapshot_date"):
        ReportDataRepository._coerce_payload(
            SkuRanking,
            {"asin": "B001", "snapshot_date": "2024-01-05 12:00"},
        )


def test_delete_by_source_id_returns_rowcount() -> None:
    session = MagicMock()
    session.execute.return_value.rowcount = 3

    deleted = ReportDataRepository(session).delete_by_source_id("daily_sales_traffic", SESSION_ID)

    assert deleted == 3
    (stmt,), _ = session.execute.call_args
    sql = compile_sql(stmt)
    assert sql.startswith("DELETE FROM daily_sales_traffic")
    assert "daily_sales_traffic.data_source_id = " in sql
