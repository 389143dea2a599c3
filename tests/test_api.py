"""
Tests for the REST API.
"""

import pytest
from fastapi.testclient import TestClient

from milk_rates.api import create_app
from milk_rates.config import default_config
from milk_rates.service import MilkRateService

from conftest import WIDER_ROWS, write_csv


@pytest.fixture
def client(app_config) -> TestClient:
    return TestClient(create_app(app_config))


class TestRateEndpoint:
    def test_exact_rate(self, client):
        response = client.get("/api/v1/fat/snf", params={"fat": "4.0", "snf": "9.0"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["rate"] == 46.5
        assert body["data"]["exact"] is True
        assert body["data"]["amount"] is None

    def test_nearest_rate_with_amount(self, client):
        response = client.get("/api/v1/fat/snf", params={"fat": "4.6", "snf": "8.4", "quantity": "10.5"})

        data = response.json()["data"]
        assert data["rate"] == 47.0
        assert data["matched_fat"] == "4.5"
        assert data["matched_snf"] == "8.5"
        assert data["amount"] == 493.5

    def test_missing_params(self, client):
        response = client.get("/api/v1/fat/snf", params={"fat": "4.0"})
        assert response.status_code == 400

    def test_non_numeric(self, client):
        response = client.get("/api/v1/fat/snf", params={"fat": "abc", "snf": "8.5"})

        assert response.status_code == 400
        assert "fat" in response.json()["detail"]

    def test_unavailable_when_no_chart(self, app_config, chart_csv):
        chart_csv.unlink()
        client = TestClient(create_app(app_config))

        response = client.get("/api/v1/fat/snf", params={"fat": "4.0", "snf": "8.5"})
        assert response.status_code == 503


class TestValuesEndpoint:
    def test_values(self, client):
        response = client.get("/api/v1/fat/snf/values")

        assert response.status_code == 200
        assert response.json()["data"] == {"fat": ["4.0", "4.5"], "snf": ["8.5", "9.0"]}

    def test_values_unavailable(self, app_config):
        client = TestClient(create_app(app_config, service=MilkRateService(app_config)))

        assert client.get("/api/v1/fat/snf/values").status_code == 503


class TestReloadEndpoint:
    def test_reload(self, client, chart_csv):
        write_csv(chart_csv, WIDER_ROWS)

        response = client.post("/api/v1/fat/snf/reload")

        assert response.status_code == 200
        body = response.json()
        assert (body["row_count"], body["column_count"], body["version"]) == (3, 3, 2)
        health = client.get("/api/v1/health").json()
        assert (health["rows"], health["columns"], health["table_version"]) == (3, 3, 2)

    def test_reload_broken_chart(self, client, chart_csv):
        chart_csv.write_text("FAT,8.5,9.0\n4.0,45.0,free\n", encoding="utf-8")

        response = client.post("/api/v1/fat/snf/reload")

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert (detail["row"], detail["column"], detail["raw_value"]) == (1, 2, "free")
        rate = client.get("/api/v1/fat/snf", params={"fat": "4.0", "snf": "9.0"}).json()
        assert rate["data"]["rate"] == 46.5

    def test_reload_requires_admin_token(self, app_config, monkeypatch):
        monkeypatch.setenv("RATES_ADMIN_TOKEN", "s3cret")
        config = default_config(app_config.data.data_dir.parent)
        client = TestClient(create_app(config))

        assert client.post("/api/v1/fat/snf/reload").status_code == 401
        assert client.post("/api/v1/fat/snf/reload", headers={"X-Admin-Token": "nope"}).status_code == 401
        ok = client.post("/api/v1/fat/snf/reload", headers={"X-Admin-Token": "s3cret"})
        assert ok.status_code == 200

    def test_reload_via_get(self, client):
        assert client.get("/api/v1/fat/snf/reload").status_code == 200


def test_out_of_range_reading_is_bad_request(client):
    response = client.get("/api/v1/fat/snf", params={"fat": "1e999999999999", "snf": "8.5"})
    assert response.status_code == 400


def test_reload_of_directory_chart_is_unprocessable(app_config, tmp_path, monkeypatch):
    client = TestClient(create_app(app_config))
    monkeypatch.setenv("MILK_RATE_CHART", str(tmp_path))

    response = client.post("/api/v1/fat/snf/reload")

    assert response.status_code == 422
    assert client.get("/api/v1/health").json()["table_version"] == 1
