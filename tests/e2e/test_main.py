"""End-to-end tests for main application."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from form_scanner.config import get_settings
from form_scanner.main import app


class TestMainApplication:
    """Test FastAPI application initialization."""

    def test_app_initialization(self):
        assert app.title == "Form Scanner Test Harness"
        assert app.version == "1.0.0"

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_correlation_id_generated(self, test_client):
        response = test_client.get("/health")

        assert response.headers["X-Correlation-ID"]

    def test_correlation_id_echoed(self, test_client):
        response = test_client.get("/health", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["X-Correlation-ID"] == "abc-123"

    def test_cors_preflight(self, test_client):
        response = test_client.options(
            "/api/scanner/extract-forms",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers

    def test_routers_registered(self):
        paths = {route.path for route in app.routes}

        assert {
            "/health",
            "/api/scanner/extract-forms",
            "/api/scanner/generate-values",
            "/api/scanner/analyze-complete",
            "/api/scanner/test-page",
            "/api/scanner/fetch-url",
            "/api/scanner/analyze-url",
            "/all-forms",
        } <= paths

    def test_startup_logs_masked_key(self, test_client, mock_logfire):
        startup_calls = [
            c for c in mock_logfire.info.call_args_list if c.args[0] == "Application startup complete"
        ]

        assert startup_calls
        assert startup_calls[0].kwargs["api_key"] == "te***********ey"


class TestLifespan:
    def test_missing_api_key_is_fatal(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.chdir("/")
        get_settings.cache_clear()
        try:
            with pytest.raises(ValidationError):
                with TestClient(app):
                    pass
        finally:
            get_settings.cache_clear()

    def test_sentry_initialized_when_dsn_set(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        monkeypatch.setenv("SENTRY_DSN", "https://public@sentry.example.com/1")
        get_settings.cache_clear()
        try:
            with patch("form_scanner.main.sentry_sdk.init") as mock_init:
                with TestClient(app):
                    pass
            mock_init.assert_called_once()
            assert mock_init.call_args.kwargs["dsn"] == "https://public@sentry.example.com/1"
        finally:
            get_settings.cache_clear()
