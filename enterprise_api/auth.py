"""Shared-secret API key verification."""
from __future__ import annotations

import hmac
import time
import uuid
from dataclasses import dataclass
from typing import Dict, Optional, Union

from fastapi.responses import JSONResponse

from enterprise_api.responses import DenialKind, ErrorBody, RateLimitedBody

API_KEY_HEADER = "x-api-key"


@dataclass(frozen=True)
class Allowed:
    client_id: str
    request_id: str
    timestamp: float


@dataclass(frozen=True)
class Denied:
    kind: DenialKind
    message: Optional[str] = None
    retry_after: Optional[int] = None

    @property
    def reason(self) -> str:
        return self.kind.reason

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def body(self) -> ErrorBody:
        message = self.message or self.kind.default_message
        if self.kind is DenialKind.RATE_LIMITED:
            return RateLimitedBody(
                error=self.kind.title, message=message, retryAfter=self.retry_after or 0
            )
        return ErrorBody(error=self.kind.title, message=message)

    def to_response(self, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code, content=self.body().model_dump(), headers=headers
        )


AuthDecision = Union[Allowed, Denied]


def new_request_id() -> str:
    return str(uuid.uuid4())


def keys_match(provided: str, configured: str) -> bool:
    """Compare two secrets without leaking where they first differ."""

    provided_bytes = provided.encode("utf-8")
    configured_bytes = configured.encode("utf-8")
    # Length is not secret, so a mismatch may return early.
    if len(provided_bytes) != len(configured_bytes):
        return False
    return hmac.compare_digest(provided_bytes, configured_bytes)


def verify_api_key(
    provided: Optional[str],
    configured: Optional[str],
    *,
    client_id: str = "unknown",
    now: Optional[float] = None,
) -> AuthDecision:
    """Decide whether ``provided`` grants access given the server's ``configured`` key."""

    if not configured:
        return Denied(DenialKind.MISCONFIGURED)
    if not provided:
        return Denied(DenialKind.UNAUTHENTICATED)
    if not keys_match(provided, configured):
        return Denied(DenialKind.FORBIDDEN)
    return Allowed(
        client_id=client_id,
        request_id=new_request_id(),
        timestamp=time.time() if now is None else now,
    )
