"""FastAPI application initialization."""

import logging
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration

from form_scanner.api import health, scanner, test_forms
from form_scanner.config import get_settings
from form_scanner.constants import APP_VERSION
from form_scanner.errors import InvalidRequestError, ScannerError
from form_scanner.logging_config import mask_pii, setup_logfire
from form_scanner.middleware.correlation_id import CorrelationIDMiddleware
from form_scanner.models.api_models import error_envelope

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Fails fast with a ValidationError when GEMINI_API_KEY is missing
    settings = get_settings()

    setup_logfire(app)

    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            environment=settings.env,
            integrations=[FastApiIntegration()],
        )

    logfire.info(
        "Application startup complete",
        model=settings.gemini_model,
        environment=settings.env,
        api_key=mask_pii(settings.gemini_api_key),
    )

    yield

    logfire.info("Application shutdown complete")


app = FastAPI(
    title="Form Scanner Test Harness",
    description="LLM-backed HTML form extraction and test value generation",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Correlation ID middleware (must be first for request tracing)
app.add_middleware(CorrelationIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ScannerError)
async def scanner_error_handler(request: Request, exc: ScannerError) -> JSONResponse:
    status_code = 400 if isinstance(exc, InvalidRequestError) else 500
    if status_code == 500:
        logfire.error(
            "Scanner request failed",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
    return JSONResponse(status_code=status_code, content=error_envelope(str(exc)))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
    return JSONResponse(status_code=400, content=error_envelope(message))


app.include_router(health.router, tags=["health"])
app.include_router(scanner.router, prefix="/api/scanner", tags=["scanner"])
app.include_router(test_forms.router, tags=["test-forms"])


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "form_scanner.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.env == "local",
    )
