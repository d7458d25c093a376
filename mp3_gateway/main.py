from __future__ import annotations

import time
from functools import lru_cache

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from mp3_gateway.api import router as api_router
from mp3_gateway.config import settings
from mp3_gateway.container import (
    get_circuit_breaker_registry,
    get_conversion_service,
    get_metrics,
    get_transcoder,
    get_upload_validator,
)
from mp3_gateway.errors import GatewayError
from mp3_gateway.logging_utils import get_logger
from mp3_gateway.responses import (
    CORS_HEADERS,
    error_response,
    not_found_response,
    preflight_response,
)


logger = get_logger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="mp3-gateway",
        version=settings.service_version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.middleware("http")
    async def cors_headers(request: Request, call_next):
        """Answer preflights before routing and tag every response for CORS."""
        if request.method == "OPTIONS":
            return preflight_response()
        response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.middleware("http")
    async def log_http_requests(request: Request, call_next):
        """Centralized logging for all HTTP requests."""
        start = time.monotonic()
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration = time.monotonic() - start
            client_host = request.client.host if request.client else "unknown"
            status_code = response.status_code if response is not None else 500
            logger.info(
                "HTTP %s %s from %s -> %d in %.3fs",
                request.method,
                request.url.path,
                client_host,
                status_code,
                duration,
            )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and known paths with the wrong method are both 404.
        if exc.status_code in (404, 405):
            return not_found_response()
        return error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        return error_response(exc.message, exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled error for %s %s", request.method, request.url.path
        )
        return error_response("Internal server error", 500)

    app.include_router(api_router)

    @app.on_event("startup")
    async def on_startup() -> None:
        # Force-init singletons so that a bad TRANSCODER value fails at startup.
        transcoder = get_transcoder()
        get_conversion_service()
        get_upload_validator()
        get_circuit_breaker_registry()
        get_metrics()
        logger.info(
            "Gateway ready (transcoder=%s, max_upload=%s, timeout=%.0fs, retries=%d)",
            transcoder.id,
            settings.max_upload_label,
            settings.transcode_timeout_seconds,
            settings.transcode_max_retries,
        )

    return app


@lru_cache(maxsize=1)
def get_app() -> FastAPI:
    return create_app()


app = get_app()
