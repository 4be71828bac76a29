"""Application exception types."""

from blog_api.domain.outcomes import OutcomeKind, status_for
from blog_api.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(
        self,
        outcome: OutcomeKind,
        code: str,
        message: str,
        details: dict | None = None,
    ) -> None:
        self.outcome = outcome
        self.status_code = status_for(outcome)
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


def unauthenticated(message: str = "Invalid or missing bearer token") -> ApiError:
    return ApiError(OutcomeKind.UNAUTHENTICATED, code="UNAUTHORIZED", message=message)


def not_found_or_foreign() -> ApiError:
    # Same payload for absent and foreign-owned resources.
    return ApiError(OutcomeKind.NOT_FOUND_OR_FOREIGN, code="RESOURCE_NOT_FOUND", message="Resource not found")


def validation_failed(field_errors: dict[str, list[str]], message: str = "Article is invalid") -> ApiError:
    return ApiError(
        OutcomeKind.VALIDATION_FAILED,
        code="VALIDATION_FAILED",
        message=message,
        details={field: list(messages) for field, messages in field_errors.items()},
    )


def unsupported_version(requested: str, supported: str) -> ApiError:
    return ApiError(
        OutcomeKind.UNSUPPORTED_VERSION,
        code="UNSUPPORTED_API_VERSION",
        message=f"Requested API version is not supported; use {supported}",
        details={"requested": requested, "supported": supported},
    )


def internal_error() -> ApiError:
    return ApiError(OutcomeKind.INTERNAL, code="INTERNAL_ERROR", message="Internal server error")


__all__ = [
    "ApiError",
    "internal_error",
    "not_found_or_foreign",
    "unauthenticated",
    "unsupported_version",
    "validation_failed",
]
