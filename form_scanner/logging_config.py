"""Centralized logging configuration with Pydantic Logfire integration."""

import logging
from typing import Any

import logfire
from fastapi import FastAPI

from form_scanner.config import get_settings


def setup_logfire(app: FastAPI) -> None:
    """
    Initialize and configure Pydantic Logfire for observability.

    Sets up:
    - FastAPI instrumentation (request/response tracing)
    - Pydantic instrumentation (model validation logging)
    - Environment-aware configuration
    - Console logging locally, bare messages elsewhere
    """
    settings = get_settings()

    logfire_config: dict[str, Any] = {
        "environment": settings.env,
        "service_name": "form-scanner",
    }

    # Add token if provided (for cloud logging)
    if settings.logfire_token:
        logfire_config["token"] = settings.logfire_token

    logfire.configure(**logfire_config)

    logfire.instrument_fastapi(app)
    logfire.instrument_pydantic()

    log_level = settings.log_level.upper()

    if settings.env == "local":
        logging.basicConfig(
            level=getattr(logging, log_level, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        logging.basicConfig(
            level=getattr(logging, log_level, logging.INFO),
            format="%(message)s",  # Logfire handles structured formatting
        )


def mask_pii(value: str | None, mask_char: str = "*") -> str:
    """
    Mask potentially sensitive data in logs.

    Args:
        value: Value to mask
        mask_char: Character to use for masking

    Returns:
        Masked string
    """
    if not value:
        return ""

    if len(value) <= 4:
        return mask_char * len(value)

    # Show first 2 and last 2 characters, mask the rest
    return f"{value[:2]}{mask_char * (len(value) - 4)}{value[-2:]}"


_SENSITIVE_KEYS = (
    "token",
    "access_token",
    "api_key",
    "secret",
    "password",
    "confirm_password",
    "authorization",
    "auth",
    "card_number",
    "cvv",
    "ssn",
)


def redact_tokens(data: dict[str, Any]) -> dict[str, Any]:
    """
    Redact credentials and secrets from log data.

    Keys are matched case-insensitively; nested dicts are redacted recursively.

    Args:
        data: Dictionary that may contain sensitive values

    Returns:
        Dictionary with sensitive values masked
    """
    redacted = data.copy()

    for key, value in data.items():
        if isinstance(value, dict):
            redacted[key] = redact_tokens(value)
        elif str(key).lower() in _SENSITIVE_KEYS and isinstance(value, str):
            redacted[key] = mask_pii(value)

    return redacted
