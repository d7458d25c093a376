from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ApiErrorResponse(BaseModel):
    """Wire shape of every error response."""

    error: bool = True
    message: str
    timestamp: str


class LimitsInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    max_file_size: str = Field(..., alias="maxFileSize")
    supported_formats: list[str] = Field(..., alias="supportedFormats")


class StatusResponse(BaseModel):
    status: str = "operational"
    service: str
    version: str
    transcoder: str
    timestamp: str
    limits: LimitsInfo
