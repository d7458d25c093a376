from .circuit_breaker import CircuitBreakerConfig, CircuitBreakerRegistry
from .conversion_service import ConversionService, mp3_filename
from .upload_parser import (
    check_content_length,
    classify_form,
    parse_upload_form,
    require_multipart,
)
from .validation import UploadValidator

__all__ = [
    "CircuitBreakerConfig",
    "CircuitBreakerRegistry",
    "ConversionService",
    "mp3_filename",
    "check_content_length",
    "classify_form",
    "parse_upload_form",
    "require_multipart",
    "UploadValidator",
]
