"""
tests/test_price_api.py

HTTP contract tests for the upload and analytics routers.

The routers are mounted on a bare FastAPI app with the service dependencies
overridden, so no database or environment configuration is needed.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.errors import register_error_handlers
from app.api.routers import price_analytics_router, price_upload_router
from app.repositories.upload_staging import UploadStagingArea
from app.services.price_ingestion_service import PriceIngestionService, get_price_ingestion_service
from app.services.price_query_service import PriceQueryService, get_price_query_service
from conftest import VALID_ROW, FailingQueryGateway, InMemoryPriceGateway, build_csv, make_row


def _client(gateway: InMemoryPriceGateway, staging_dir: Path) -> TestClient:
    application = FastAPI()
    register_error_handlers(application)
    application.include_router(price_upload_router)
    application.include_router(price_analytics_router)

    ingestion_service = PriceIngestionService(
        gateway=gateway,
        max_workers=4,
        staging_area=UploadStagingArea(staging_dir),
    )
    query_service = PriceQueryService(gateway=gateway)
    application.dependency_overrides[get_price_ingestion_service] = lambda: ingestion_service
    application.dependency_overrides[get_price_query_service] = lambda: query_service
    return TestClient(application)


@pytest.fixture()
def staging_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture()
def client(gateway: InMemoryPriceGateway, staging_dir: Path) -> TestClient:
    return _client(gateway, staging_dir)


def _post_csv(client: TestClient, content: str, content_type: str = "text/csv"):
    return client.post(
        "/upload",
        files={"file": ("prices.csv", content.encode("utf-8"), content_type)},
    )


# ---------------------------------------------------------------------------
# POST /upload
# ---------------------------------------------------------------------------


class TestUpload:
    def test_mixed_upload_report(self, client: TestClient, staging_dir: Path) -> None:
        content = build_csv([VALID_ROW, make_row(Volume="abc"), make_row(Date="not-a-date")])

        response = _post_csv(client, content)

        assert response.status_code == 200
        body = response.json()
        assert body["totalRecords"] == 3
        assert body["successfulRecords"] == 1
        assert body["failedRecords"] == 2
        errors_by_date = {entry["row"]["Date"]: entry["error"] for entry in body["errors"]}
        assert "Invalid number in Volume" in errors_by_date["2021-04-30"]
        assert "Invalid Date format" in errors_by_date["not-a-date"]
        assert errors_by_date["not-a-date"] == ["Invalid Date format"]
        assert list(staging_dir.iterdir()) == []

    def test_error_row_echoes_original_cells(self, client: TestClient) -> None:
        bad = make_row(Close="n/a")
        body = _post_csv(client, build_csv([bad])).json()
        assert body["errors"] == [{"row": bad, "error": ["Invalid number in Close"]}]

    def test_insert_failure_is_a_plain_string(self, staging_dir: Path) -> None:
        client = _client(InMemoryPriceGateway(fail_symbols=["BAD"]), staging_dir)

        body = _post_csv(client, build_csv([make_row(Symbol="BAD")])).json()

        assert body["failedRecords"] == 1
        assert body["errors"][0]["error"] == "Database insertion error"

    def test_content_type_parameters_are_ignored(self, client: TestClient) -> None:
        response = _post_csv(client, build_csv([VALID_ROW]), content_type="text/csv; charset=utf-8")
        assert response.status_code == 200
        assert response.json()["successfulRecords"] == 1

    def test_non_csv_is_rejected(self, client: TestClient, gateway: InMemoryPriceGateway) -> None:
        response = _post_csv(client, build_csv([VALID_ROW]), content_type="application/json")
        assert response.status_code == 400
        assert response.json() == {"error": "Please upload a CSV file."}
        assert gateway.records == []

    def test_missing_file_is_rejected(self, client: TestClient) -> None:
        response = client.post("/upload", data={"note": "no file"})
        assert response.status_code == 400
        assert response.json() == {"error": "Please upload a CSV file."}

    def test_corrupt_csv_is_server_error(self, client: TestClient, staging_dir: Path) -> None:
        content = build_csv([VALID_ROW]) + '2021-05-03,"INFY"X,EQ\n'

        response = _post_csv(client, content)

        assert response.status_code == 500
        assert response.json() == {"error": "Unable to read the uploaded CSV file."}
        assert list(staging_dir.iterdir()) == []


# ---------------------------------------------------------------------------
# GET /api/*
# ---------------------------------------------------------------------------


class TestAnalytics:
    @pytest.fixture(autouse=True)
    def _seed(self, client: TestClient) -> None:
        rows = [
            make_row(Date="2021-04-28", Symbol="INFY", Volume="100", Close="10.004", VWAP="1.5"),
            make_row(Date="2021-04-29", Symbol="INFY", Volume="250", Close="20.0", VWAP="2.5"),
            make_row(Date="2021-04-29", Symbol="TCS", Volume="200", Close="35.5", VWAP="4.0"),
        ]
        assert _post_csv(client, build_csv(rows)).json()["successfulRecords"] == 3

    def test_highest_volume(self, client: TestClient) -> None:
        response = client.get(
            "/api/highest_volume",
            params={"start_date": "2021-04-01", "end_date": "2021-04-30"},
        )
        assert response.status_code == 200
        assert response.json() == {
            "highest_volume": {"date": "2021-04-29", "symbol": "INFY", "volume": 250}
        }

    def test_highest_volume_with_symbol(self, client: TestClient) -> None:
        response = client.get(
            "/api/highest_volume",
            params={"start_date": "2021-04-01", "end_date": "2021-04-30", "symbol": "TCS"},
        )
        assert response.json()["highest_volume"]["volume"] == 200

    def test_highest_volume_not_found(self, client: TestClient) -> None:
        response = client.get(
            "/api/highest_volume",
            params={"start_date": "2020-01-01", "end_date": "2020-01-31"},
        )
        assert response.status_code == 404
        assert response.json() == {"message": "No data found for the specified criteria"}

    def test_highest_volume_requires_dates(self, client: TestClient) -> None:
        response = client.get("/api/highest_volume", params={"start_date": "2021-04-01"})
        assert response.status_code == 400
        assert response.json() == {"error": "Start date and end date are required"}

    def test_highest_volume_invalid_date(self, client: TestClient) -> None:
        response = client.get(
            "/api/highest_volume",
            params={"start_date": "2021-04-01", "end_date": "2021-04-31"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid date format. Use YYYY-MM-DD"}

    def test_average_close(self, client: TestClient) -> None:
        response = client.get(
            "/api/average_close",
            params={"start_date": "2021-04-01", "end_date": "2021-04-30", "symbol": "INFY"},
        )
        assert response.status_code == 200
        assert response.json() == {"average_close": 15.0}

    def test_average_close_requires_symbol(self, client: TestClient) -> None:
        response = client.get(
            "/api/average_close",
            params={"start_date": "2021-04-01", "end_date": "2021-04-30"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Start date, end date and symbol are required"}

    def test_average_close_no_match_is_zero(self, client: TestClient) -> None:
        response = client.get(
            "/api/average_close",
            params={"start_date": "2021-04-01", "end_date": "2021-04-30", "symbol": "WIPRO"},
        )
        assert response.status_code == 200
        assert response.json() == {"average_close": 0}

    def test_average_vwap(self, client: TestClient) -> None:
        response = client.get(
            "/api/average_vwap",
            params={"start_date": "2021-04-01", "end_date": "2021-04-30"},
        )
        assert response.status_code == 200
        assert response.json()["average_vwap"] == pytest.approx(2.67)

    def test_average_vwap_no_match_is_zero(self, client: TestClient) -> None:
        response = client.get(
            "/api/average_vwap",
            params={"start_date": "2022-01-01", "end_date": "2022-12-31"},
        )
        assert response.status_code == 200
        assert response.json() == {"average_vwap": 0}


def test_storage_failure_on_query_is_server_error(staging_dir: Path) -> None:
    client = _client(FailingQueryGateway(), staging_dir)

    response = client.get(
        "/api/average_vwap",
        params={"start_date": "2021-04-01", "end_date": "2021-04-30"},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred while processing your request"}
