"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Infrastructure: respx_mock, mock_settings, mock_logfire, test_client
2. Model replies: gemini_reply, extraction_reply_text, values_reply_text
3. Sample data: sample_form, sample_html
"""

import json
import os
from contextlib import contextmanager
from unittest.mock import MagicMock, Mock

import pytest
import respx

# Suppress warnings when logfire isn't configured
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

GEMINI_ENDPOINT = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-pro:generateContent"
)


@pytest.fixture
def respx_mock():
    """Respx mock fixture for HTTP mocking."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def mock_settings(monkeypatch):
    """Settings built without touching .env files."""
    from form_scanner.config import Settings

    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    settings = Settings(
        _env_file=None,
        gemini_api_key="test-gemini-key",
        env="local",
        logfire_token=None,
        sentry_dsn=None,
    )
    return settings


@pytest.fixture(autouse=True)
def mock_logfire(monkeypatch):
    """
    Mock Logfire for testing without actual logging.

    Auto-applied to all tests; assert on the returned mock to check log calls.
    """

    @contextmanager
    def mock_span(*args, **kwargs):
        yield MagicMock()

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warn = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = mock_span
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()

    for module in (
        "form_scanner.main",
        "form_scanner.logging_config",
        "form_scanner.middleware.correlation_id",
        "form_scanner.services.html_fetcher",
        "form_scanner.services.gemini_service",
        "form_scanner.services.form_analyzer",
        "form_scanner.services.benchmark_runner",
    ):
        monkeypatch.setattr(f"{module}.logfire", mock_logfire_module)

    return mock_logfire_module


@pytest.fixture
def test_client(mock_settings):
    """FastAPI TestClient with settings overridden and the lifespan running."""
    from fastapi.testclient import TestClient

    from form_scanner.config import get_settings
    from form_scanner.main import app

    get_settings.cache_clear()
    app.dependency_overrides[get_settings] = lambda: mock_settings
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
    get_settings.cache_clear()


def make_gemini_body(text: str, prompt_tokens: int = 1000, output_tokens: int = 200) -> dict:
    """generateContent response body wrapping text."""
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": text}], "role": "model"},
                "finishReason": "STOP",
            }
        ],
        "usageMetadata": {
            "promptTokenCount": prompt_tokens,
            "candidatesTokenCount": output_tokens,
            "totalTokenCount": prompt_tokens + output_tokens,
        },
    }


@pytest.fixture
def gemini_endpoint():
    """generateContent URL for the default model."""
    return GEMINI_ENDPOINT


@pytest.fixture
def gemini_reply():
    """Factory for generateContent response bodies."""
    return make_gemini_body


@pytest.fixture
def sample_form():
    """A form descriptor as the extraction phase returns it (camelCase)."""
    return {
        "formId": "contact-form",
        "formType": "traditional",
        "selector": "#contact-form",
        "submitSelector": "#contact-submit",
        "submitType": "button-click",
        "fields": [
            {
                "fieldName": "name",
                "fieldType": "text",
                "selector": "#name",
                "required": True,
                "validation": {"minLength": 2, "maxLength": 50},
                "placeholder": "Jane Doe",
                "defaultValue": None,
                "options": None,
            },
            {
                "fieldName": "email",
                "fieldType": "email",
                "selector": "#email",
                "required": True,
                "validation": {"type": "email"},
            },
        ],
        "specialFeatures": [],
    }


def extraction_payload(forms: list[dict]) -> dict:
    return {
        "summary": {
            "totalFunctionalForms": len(forms),
            "totalFields": sum(len(f.get("fields", [])) for f in forms),
            "formsIgnored": 1,
            "confidence": "high",
        },
        "forms": forms,
    }


@pytest.fixture
def make_extraction_reply():
    """Factory: list of form dicts -> fenced extraction reply text."""

    def _make(forms: list[dict]) -> str:
        return f"```json\n{json.dumps(extraction_payload(forms))}\n```"

    return _make


@pytest.fixture
def extraction_reply_text(sample_form):
    """Extraction reply wrapped in a ```json fence, as the model usually answers."""
    payload = extraction_payload([sample_form])
    return f"Here are the forms:\n```json\n{json.dumps(payload)}\n```"


@pytest.fixture
def values_reply_text():
    payload = {
        "formId": "contact-form",
        "values": {"name": "Sarah Johnson", "email": "sarah.johnson@example.com"},
        "metadata": {"allValidationsSatisfied": True, "notes": "All fields valid"},
    }
    return f"```json\n{json.dumps(payload)}\n```"


@pytest.fixture
def sample_html():
    return """
    <html>
      <body>
        <form id="contact-form"><input name="name"><button>Send</button></form>
      </body>
    </html>
    """
