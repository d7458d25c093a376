from __future__ import annotations


class GatewayError(Exception):
    """Base class for errors that map onto a JSON error response."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UploadValidationError(GatewayError):
    """The client sent something we refuse to convert."""

    status_code = 400


class ConversionError(GatewayError):
    """The transcoder could not produce MP3 output.

    `transient` marks failures worth a bounded retry (e.g. the worker
    process was killed); deterministic failures must not be retried.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        transient: bool = False,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.transient = transient


class ConversionTimeoutError(ConversionError):
    status_code = 504


class TranscoderUnavailableError(ConversionError):
    status_code = 503
