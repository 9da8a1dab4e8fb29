"""
tests/test_uploads_api.py

HTTP contract of the upload router with in-memory collaborators.
"""

from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_client_access_check
from app.config import UploadSettings, get_upload_settings
from app.main import create_app
from app.parsers.registry import get_parser_registry
from app.services.ingestion_session_tracker import get_ingestion_session_tracker
from app.services.report_ingestion_service import get_report_ingestion_service
from db.repositories.errors import ClientAccessError, ClientInactiveError, ClientNotFoundError

DAILY_CSV = "Date,Ordered Product Sales\n1/1/25,$10.00\n1/2/25,$12.00\n,$1\n"


@pytest.fixture()
def client_errors() -> dict[uuid.UUID, Exception]:
    return {}


@pytest.fixture()
def api(service, tracker, registry, client_errors, organization_id) -> TestClient:
    def check(client_id: uuid.UUID, org_id: uuid.UUID) -> None:
        error = client_errors.get(client_id)
        if error is not None:
            raise error

    application = create_app(check_database=False)
    application.dependency_overrides[get_report_ingestion_service] = lambda: service
    application.dependency_overrides[get_ingestion_session_tracker] = lambda: tracker
    application.dependency_overrides[get_parser_registry] = lambda: registry
    application.dependency_overrides[get_client_access_check] = lambda: check
    application.dependency_overrides[get_upload_settings] = lambda: UploadSettings(max_upload_bytes=4096)

    client = TestClient(application)
    client.headers.update({"X-Organization-Id": str(organization_id)})
    return client


def post_upload(api: TestClient, client_id: uuid.UUID, **overrides: object):
    body: dict[str, object] = {
        "clientId": str(client_id),
        "reportType": "daily_sales",
        "content": DAILY_CSV,
        "fileName": "sales.csv",
    }
    body.update(overrides)
    return api.post("/api/uploads", json=body)


def test_health(api) -> None:
    assert api.get("/health").json() == {"status": "ok"}


def test_upload_returns_counts_and_row_errors(api, client_id, store) -> None:
    response = post_upload(api, client_id)

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["reportType"] == "daily_sales"
    assert (payload["inserted"], payload["updated"], payload["skipped"], payload["errors"]) == (2, 0, 1, 1)
    assert payload["errorDetails"] == [
        {"row": 4, "message": "Invalid or missing date", "field": "date", "rawValue": ""}
    ]
    uuid.UUID(payload["sessionId"])
    assert len(store.rows("daily_sales_traffic")) == 2


def test_invalid_report_type_is_rejected_before_session(api, client_id, tracker) -> None:
    response = post_upload(api, client_id, reportType="weekly")

    assert response.status_code == 400
    assert "daily_sales" in response.json()["detail"]
    assert tracker.sessions == {}


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (ClientNotFoundError("missing"), 404),
        (ClientAccessError("other org"), 403),
        (ClientInactiveError("inactive"), 400),
    ],
)
def test_client_access_errors(api, client_id, client_errors, tracker, error, status_code) -> None:
    client_errors[client_id] = error

    response = post_upload(api, client_id)

    assert response.status_code == status_code
    assert tracker.sessions == {}


def test_oversized_upload_is_413(api, client_id) -> None:
    response = post_upload(api, client_id, content="x" * 5000)

    assert response.status_code == 413


def test_missing_organization_header_is_422(api, client_id) -> None:
    response = api.post(
        "/api/uploads",
        json={"clientId": str(client_id), "reportType": "daily_sales", "content": DAILY_CSV},
        headers={"X-Organization-Id": ""},
    )

    assert response.status_code == 422


def test_history_lists_newest_first(api, client_id) -> None:
    first = post_upload(api, client_id).json()["sessionId"]
    second = post_upload(api, client_id, fileName="again.csv").json()["sessionId"]

    response = api.get("/api/uploads/history", params={"clientId": str(client_id), "limit": 10})

    assert response.status_code == 200
    payload = response.json()
    assert payload["total"] == 2
    assert [session["id"] for session in payload["sessions"]] == [second, first]
    assert payload["sessions"][0]["status"] == "completed"
    assert payload["sessions"][0]["recordsInserted"] == 0
    assert payload["sessions"][0]["recordsUpdated"] == 2


def test_history_limit_is_bounded(api) -> None:
    assert api.get("/api/uploads/history", params={"limit": 0}).status_code == 422


def test_report_types_catalog(api) -> None:
    response = api.get("/api/uploads/report-types")

    assert response.status_code == 200
    types = {entry["type"]: entry for entry in response.json()}
    assert len(types) == 12
    assert types["inventory"]["tableName"] == "inventory_snapshots"
    assert types["advertising_bulk"]["fileHint"].endswith(".xlsx from Amazon Advertising console")


def test_ingestion_log_for_client(api, client_id) -> None:
    session_id = post_upload(api, client_id).json()["sessionId"]

    response = api.get(f"/api/uploads/ingestion-log/{client_id}", params={"sourceType": "manual_upload"})

    assert response.status_code == 200
    (entry,) = response.json()
    assert entry["sourceId"] == session_id
    assert entry["recordCount"] == 2
    assert entry["dateRangeStart"] == "2025-01-01"
    assert entry["metadata"]["report_type"] == "daily_sales"


def test_delete_upload(api, client_id, store, tracker) -> None:
    session_id = post_upload(api, client_id).json()["sessionId"]

    response = api.delete(f"/api/uploads/{session_id}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "deletedRecords": 2}
    assert store.rows("daily_sales_traffic") == []
    assert tracker.sessions == {}


def test_delete_unknown_session_is_404(api) -> None:
    assert api.delete(f"/api/uploads/{uuid.uuid4()}").status_code == 404


def test_delete_other_organization_session_is_403(api, client_id) -> None:
    session_id = post_upload(api, client_id).json()["sessionId"]

    response = api.delete(
        f"/api/uploads/{session_id}",
        headers={"X-Organization-Id": str(uuid.uuid4())},
    )

    assert response.status_code == 403
