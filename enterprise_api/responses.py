"""JSON bodies returned when a request is turned away."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel


class DenialKind(str, Enum):
    """Every way the request gate can refuse a request."""

    RATE_LIMITED = "rate_limited"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    MISCONFIGURED = "misconfigured"
    INTERNAL_FAULT = "internal_fault"

    @property
    def status_code(self) -> int:
        return _STATUS[self]

    @property
    def title(self) -> str:
        return _TITLES[self]

    @property
    def reason(self) -> str:
        return _REASONS[self]

    @property
    def default_message(self) -> str:
        return _MESSAGES[self]


_STATUS = {
    DenialKind.RATE_LIMITED: 429,
    DenialKind.UNAUTHENTICATED: 401,
    DenialKind.FORBIDDEN: 403,
    DenialKind.MISCONFIGURED: 500,
    DenialKind.INTERNAL_FAULT: 500,
}

_TITLES = {
    DenialKind.RATE_LIMITED: "Too Many Requests",
    DenialKind.UNAUTHENTICATED: "Authentication Required",
    DenialKind.FORBIDDEN: "Invalid API Key",
    DenialKind.MISCONFIGURED: "Server Configuration Error",
    DenialKind.INTERNAL_FAULT: "Internal Server Error",
}

_REASONS = {
    DenialKind.RATE_LIMITED: "rate limit exceeded",
    DenialKind.UNAUTHENTICATED: "missing api key",
    DenialKind.FORBIDDEN: "invalid api key",
    DenialKind.MISCONFIGURED: "server configuration error",
    DenialKind.INTERNAL_FAULT: "internal error",
}

_MESSAGES = {
    DenialKind.RATE_LIMITED: "Rate limit exceeded. Please slow down.",
    DenialKind.UNAUTHENTICATED: "An API key is required. Send it in the x-api-key header.",
    DenialKind.FORBIDDEN: "The provided API key is not valid.",
    DenialKind.MISCONFIGURED: "API authentication is not configured on the server.",
    DenialKind.INTERNAL_FAULT: "An unexpected error occurred.",
}


class ErrorBody(BaseModel):
    success: bool = False
    error: str
    message: str


class RateLimitedBody(ErrorBody):
    retryAfter: int


class RouteNotFoundBody(ErrorBody):
    availableEndpoints: List[str]
    requestId: Optional[str] = None


def error_response(
    status_code: int,
    error: str,
    message: str,
    headers: Optional[Dict[str, str]] = None,
    **extra: Any,
) -> JSONResponse:
    """Build the ``{success: false, error, message}`` envelope used by every route."""

    content = ErrorBody(error=error, message=message).model_dump()
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)
