from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from mp3_gateway.config import settings
from mp3_gateway.container import (
    get_conversion_service,
    get_metrics,
    get_upload_validator,
)
from mp3_gateway.errors import UploadValidationError
from mp3_gateway.logging_utils import get_logger
from mp3_gateway.metrics import GatewayMetrics
from mp3_gateway.models import (
    SUPPORTED_EXTENSIONS,
    Converted,
    LimitsInfo,
    Rejected,
    StatusResponse,
)
from mp3_gateway.pages import render_index_page
from mp3_gateway.responses import (
    CORS_HEADERS,
    error_response,
    mp3_response,
    not_found_response,
    utc_timestamp,
)
from mp3_gateway.services import ConversionService, UploadValidator, parse_upload_form


logger = get_logger(__name__)
router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Static API documentation and demo upload page."""
    return HTMLResponse(render_index_page(settings))


@router.get("/api/status", response_model=StatusResponse)
async def status(
    service: ConversionService = Depends(get_conversion_service),
) -> StatusResponse:
    return StatusResponse(
        service=settings.service_name,
        version=settings.service_version,
        transcoder=service.transcoder_id,
        timestamp=utc_timestamp(),
        limits=LimitsInfo(
            max_file_size=settings.max_upload_label,
            supported_formats=[ext.lstrip(".") for ext in SUPPORTED_EXTENSIONS],
        ),
    )


@router.post("/api/convert")
async def convert(
    request: Request,
    validator: UploadValidator = Depends(get_upload_validator),
    service: ConversionService = Depends(get_conversion_service),
    metrics: GatewayMetrics = Depends(get_metrics),
) -> Response:
    """Convert the uploaded `video` field to an MP3 download.

    Validation failures are answered before the transcoder is touched;
    transcoder failures come back as JSON errors with the status the
    conversion service chose (500, 503 or 504).
    """
    try:
        fields = await parse_upload_form(
            request,
            max_file_bytes=validator.max_upload_bytes,
            max_body_bytes=validator.max_body_bytes,
            too_large_message=validator.too_large_message,
        )
    except UploadValidationError as exc:
        too_large = exc.message == validator.too_large_message
        metrics.record_rejection("too_large" if too_large else "malformed_request")
        return error_response(exc.message, exc.status_code)

    result = validator.validate(fields)
    if isinstance(result, Rejected):
        logger.info("Upload rejected (%s): %s", result.code, result.reason)
        metrics.record_rejection(result.code)
        return error_response(result.reason, result.status_code)

    outcome = await service.convert(result.upload)
    if isinstance(outcome, Converted):
        return mp3_response(outcome)
    return error_response(outcome.message, outcome.status_code)


@router.get("/metrics")
async def metrics_endpoint(
    metrics: GatewayMetrics = Depends(get_metrics),
) -> Response:
    if not settings.metrics_enabled:
        return not_found_response()
    payload = generate_latest(metrics.registry)
    return PlainTextResponse(
        payload,
        media_type=CONTENT_TYPE_LATEST,
        headers=dict(CORS_HEADERS),
    )
