"""Tests for API key authentication and the scheduled reload job."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

import marocstats.scheduler as scheduler_module
from marocstats.api.auth import verify_api_key
from marocstats.api.routes import router
from marocstats.config import DATA_DIR, Settings
from marocstats.ingestion.sources import MissingInputError


def _settings(api_key=None) -> Settings:
    return Settings(
        geo_source=str(DATA_DIR / "regions.geojson"),
        retirees_source=str(DATA_DIR / "retraites_2022.json"),
        unemployment_source=str(DATA_DIR / "chomage_regional.csv"),
        api_key=api_key,
    )


def _request(api_key=None):
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(settings=_settings(api_key))))


class TestVerifyApiKey:
    def test_open_mode_when_no_key_set(self):
        """Without MAROCSTATS_API_KEY every request passes."""
        assert asyncio.run(verify_api_key(_request(None), None)) is None

    def test_reject_missing_key(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(verify_api_key(_request("secret-key-123"), None))
        assert exc_info.value.status_code == 403

    def test_reject_wrong_key(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(verify_api_key(_request("secret-key-123"), "wrong-key"))
        assert exc_info.value.status_code == 403

    def test_accept_correct_key(self):
        assert asyncio.run(verify_api_key(_request("secret-key-123"), "secret-key-123")) == "secret-key-123"

    def test_falls_back_to_environment(self, monkeypatch):
        monkeypatch.setenv("MAROCSTATS_API_KEY", "from-env")
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))
        assert asyncio.run(verify_api_key(request, "from-env")) == "from-env"


class TestProtectedEndpoints:
    @pytest.fixture
    def client(self, context) -> TestClient:
        app = FastAPI()
        app.include_router(router)
        app.state.context = context
        app.state.settings = _settings("secret-key-123")
        return TestClient(app)

    def test_missing_header(self, client):
        assert client.get("/api/v1/datasets").status_code == 403

    def test_valid_header(self, client):
        resp = client.get("/api/v1/datasets", headers={"X-API-Key": "secret-key-123"})
        assert resp.status_code == 200

    def test_health_is_open(self, client):
        assert client.get("/api/v1/health").status_code == 200


class TestScheduler:
    def test_not_started_without_interval(self):
        assert scheduler_module.start_scheduler(None, lambda context: None) is None

    def test_reload_hands_over_new_context(self, context, monkeypatch):
        received = []
        monkeypatch.setattr(scheduler_module, "load_context_sync", lambda: context)
        assert scheduler_module.reload_job(received.append) is True
        assert received == [context]
        assert scheduler_module.get_last_run() is not None

    def test_failed_reload_keeps_current_context(self, monkeypatch):
        def failing():
            raise MissingInputError("Cannot read data/chomage_regional.csv")

        received = []
        monkeypatch.setattr(scheduler_module, "load_context_sync", failing)
        assert scheduler_module.reload_job(received.append) is False
        assert received == []
