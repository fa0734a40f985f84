"""Uniform error shape surfaced by every service operation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

BAD_REQUEST = 400
UNAUTHORIZED = 401
FORBIDDEN = 403
NOT_FOUND = 404
TOO_MANY_REQUESTS = 429
INTERNAL_SERVER_ERROR = 500
BAD_GATEWAY = 502

ERROR_MESSAGES: dict[int, str] = {
    BAD_REQUEST: "Bad Request - Invalid parameters provided",
    UNAUTHORIZED: "Unauthorized - Authentication required",
    FORBIDDEN: "Forbidden - Insufficient permissions",
    NOT_FOUND: "Not Found - Requested resource does not exist",
    TOO_MANY_REQUESTS: "Too Many Requests - Rate limit exceeded",
    INTERNAL_SERVER_ERROR: "Internal Server Error - Something went wrong",
}


class ApiError(BaseModel):
    """``{status, message, code?, details?}`` as seen by callers."""

    model_config = ConfigDict(frozen=True)

    status: int
    message: str
    code: str | None = None
    details: Any = None

    def __str__(self) -> str:
        if self.code:
            return f"{self.status} {self.code}: {self.message}"
        return f"{self.status}: {self.message}"


def not_found(message: str) -> ApiError:
    return ApiError(status=NOT_FOUND, message=message, code="NOT_FOUND")


def rate_limited() -> ApiError:
    return ApiError(
        status=TOO_MANY_REQUESTS,
        message="Too Many Requests",
        code="RATE_LIMIT_EXCEEDED",
    )


def simulated_error(status: int) -> ApiError:
    """Error injected by the resilience layer for the given HTTP status."""
    return ApiError(
        status=status,
        message=ERROR_MESSAGES.get(status, "Unknown Error"),
        code="SIMULATED_ERROR",
    )


def decode_error(endpoint: str, details: Any = None) -> ApiError:
    return ApiError(
        status=BAD_GATEWAY,
        message=f"Response from {endpoint} does not match the expected schema",
        code="DECODE_ERROR",
        details=details,
    )
