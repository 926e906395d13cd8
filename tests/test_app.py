"""Tests for application wiring: health, meta, auth and error shape."""

import pytest

from config.settings import settings
from services.user_client import UserClient, get_user_client


class TestHealth:
    def test_health(self, client):
        res = client.get("/health")
        assert res.status_code == 200
        assert res.json()["status"] == "ok"

    def test_latency_header(self, client):
        res = client.get("/v1/meta/health")
        assert "X-Latency-Ms" in res.headers


class TestMeta:
    def test_limits_follow_settings(self, client):
        body = client.get("/v1/meta/limits").json()
        assert body["page_size_default"] == settings.DEFAULT_PAGE_SIZE
        assert body["upload_max_mb"] == settings.MAX_UPLOAD_MB

    def test_options_lists_every_select(self, client):
        data = client.get("/v1/meta/options").json()["data"]
        assert {"value": "PRESENTE", "label": "Presente", "color": "success"} in data["attendanceStatuses"]
        assert "MAÑANA" in data["shifts"]
        assert data["classroomTypes"] == ["POR_EDAD", "POR_GRADO", "MIXTO"]
        assert len(data["academicYears"]) == 3


class TestConsoleToken:
    @pytest.fixture
    def token(self, monkeypatch):
        monkeypatch.setattr(settings, "CONSOLE_API_TOKEN", "s3cret")
        return "s3cret"

    @pytest.fixture
    def users(self, upstream):
        fake = upstream(get_user_client, UserClient)
        fake.on("GET", "", [])
        return fake

    def test_missing_header_is_401(self, client, token, users):
        res = client.get("/v1/users")
        assert res.status_code == 401
        assert res.headers["WWW-Authenticate"] == "Bearer"
        assert res.json()["error"]["code"] == "HTTP_401"

    def test_wrong_token_is_401(self, client, token, users):
        res = client.get("/v1/users", headers={"Authorization": "Bearer nope"})
        assert res.status_code == 401

    def test_valid_token_passes(self, client, token, users):
        res = client.get("/v1/users", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 200

    def test_meta_stays_open(self, client, token):
        assert client.get("/v1/meta/options").status_code == 200


class TestErrorShape:
    def test_upstream_server_error_is_502(self, client, upstream):
        fake = upstream(get_user_client, UserClient)
        fake.on("GET", "", {"message": "boom"}, status=500)
        res = client.get("/v1/users")
        # 500 upstream is not actionable by the console
        assert res.status_code == 502
        error = res.json()["error"]
        assert error["code"] == "UPSTREAM_ERROR"
        assert error["service"] == "users"
        assert error["message"] == "boom"
