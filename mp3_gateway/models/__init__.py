from .api import ApiErrorResponse, LimitsInfo, StatusResponse
from .domain import (
    Accepted,
    ConversionOutcome,
    Converted,
    Failed,
    FileField,
    FormField,
    Rejected,
    TextField,
    UploadRequest,
    ValidationResult,
)
from .video_format import (
    ALLOWED_MEDIA_TYPES,
    SUPPORTED_EXTENSIONS,
    VideoFormat,
    format_for_extension,
    format_for_media_type,
)

__all__ = [
    "ApiErrorResponse",
    "LimitsInfo",
    "StatusResponse",
    "Accepted",
    "ConversionOutcome",
    "Converted",
    "Failed",
    "FileField",
    "FormField",
    "Rejected",
    "TextField",
    "UploadRequest",
    "ValidationResult",
    "ALLOWED_MEDIA_TYPES",
    "SUPPORTED_EXTENSIONS",
    "VideoFormat",
    "format_for_extension",
    "format_for_media_type",
]
