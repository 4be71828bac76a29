"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class UnauthorizedError(BaseModel):
    code: Literal["UNAUTHORIZED"]
    message: str


class NoLeakNotFoundError(BaseModel):
    code: Literal["RESOURCE_NOT_FOUND"]
    message: str


class ValidationFailedError(BaseModel):
    code: Literal["VALIDATION_FAILED"]
    message: str
    details: dict[str, list[str]]


class UnsupportedVersionErrorDetails(BaseModel):
    requested: str
    supported: str


class UnsupportedVersionError(BaseModel):
    code: Literal["UNSUPPORTED_API_VERSION"]
    message: str
    details: UnsupportedVersionErrorDetails
