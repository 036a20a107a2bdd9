"""Request gate: per-client rate limiting followed by API key verification.

The gate runs as HTTP middleware in front of every route under the
protected prefix. For each request it

1. derives the client identifier from the peer address,
2. consults the rate limiter and always reports the limit headers,
3. verifies the ``x-api-key`` header only when the limiter let the request through,
4. hands the request to the route with ``client_id``, ``request_id`` and
   ``authenticated_at`` stored on ``request.state``.

Every rejection is answered locally with a JSON body and logged; faults
raised while deciding, or by the route itself, become a 500 response rather
than escaping to the server.
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from fastapi import Request
from starlette.responses import Response

from enterprise_api.auth import API_KEY_HEADER, Allowed, AuthDecision, Denied, new_request_id, verify_api_key
from enterprise_api.config import Settings
from enterprise_api.rate_limit import RateLimiter, RateLimitResult
from enterprise_api.responses import DenialKind

LOGGER = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]
Clock = Callable[[], float]


@dataclass(frozen=True)
class GateOutcome:
    decision: AuthDecision
    rate_limit: Optional[RateLimitResult] = None

    @property
    def allowed(self) -> bool:
        return isinstance(self.decision, Allowed)


@dataclass(frozen=True)
class RequestContext:
    client_id: str
    request_id: str
    authenticated_at: Optional[float] = None


def client_identifier(request: Request) -> str:
    return request.client.host if request.client and request.client.host else "unknown"


def rate_limit_headers(result: RateLimitResult) -> Dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(math.ceil(result.reset_at)),
    }


def get_request_context(request: Request) -> RequestContext:
    """Expose what the gate learned about the caller to route handlers."""

    return RequestContext(
        client_id=getattr(request.state, "client_id", client_identifier(request)),
        request_id=getattr(request.state, "request_id", ""),
        authenticated_at=getattr(request.state, "authenticated_at", None),
    )


class RequestGate:
    """Callable HTTP middleware guarding the business routes."""

    def __init__(
        self,
        settings: Settings,
        rate_limiter: RateLimiter,
        *,
        clock: Clock = time.time,
        protected_prefix: str = "/api",
    ) -> None:
        self._settings = settings
        self._rate_limiter = rate_limiter
        self._clock = clock
        self._prefix = protected_prefix.rstrip("/")

    def is_protected(self, path: str) -> bool:
        return path == self._prefix or path.startswith(self._prefix + "/")

    def evaluate(self, client_id: str, provided_key: Optional[str], now: float) -> GateOutcome:
        """Run the rate limiter and then the key check for a single request."""

        limit = self._rate_limiter.check(client_id, now)
        if not limit.allowed:
            retry_after = math.ceil(limit.reset_at - now)
            decision: AuthDecision = Denied(
                DenialKind.RATE_LIMITED,
                message=f"Rate limit exceeded. Try again in {retry_after} seconds.",
                retry_after=retry_after,
            )
        else:
            decision = verify_api_key(
                provided_key, self._settings.api_key, client_id=client_id, now=now
            )
        if isinstance(decision, Denied):
            self._log_rejection(client_id, decision)
        return GateOutcome(decision=decision, rate_limit=limit)

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        started = time.perf_counter()
        client_id = client_identifier(request)
        headers: Dict[str, str] = {}

        if self.is_protected(request.url.path):
            try:
                outcome = self.evaluate(client_id, request.headers.get(API_KEY_HEADER), self._clock())
            except Exception:  # noqa: BLE001
                LOGGER.exception("request gate failed", extra={"client_id": client_id})
                outcome = GateOutcome(decision=Denied(DenialKind.INTERNAL_FAULT))
                self._log_rejection(client_id, outcome.decision)
            if outcome.rate_limit is not None:
                headers.update(rate_limit_headers(outcome.rate_limit))
            decision = outcome.decision
            if isinstance(decision, Denied):
                if decision.kind is DenialKind.RATE_LIMITED:
                    headers["Retry-After"] = str(decision.retry_after)
                response: Response = decision.to_response(headers=headers)
                return self._finish(request, response, client_id, started)
            request.state.request_id = decision.request_id
            request.state.authenticated_at = decision.timestamp
        else:
            request.state.request_id = new_request_id()

        request.state.client_id = client_id
        try:
            response = await call_next(request)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception(
                "unhandled exception",
                extra={
                    "client_id": client_id,
                    "request_id": request.state.request_id,
                    "method": request.method,
                    "path": request.url.path,
                },
            )
            message = str(exc) if self._settings.is_development else None
            response = Denied(DenialKind.INTERNAL_FAULT, message=message).to_response()
        headers["X-Request-ID"] = request.state.request_id
        response.headers.update(headers)
        return self._finish(request, response, client_id, started)

    def _log_rejection(self, client_id: str, decision: Denied) -> None:
        extra = {"client_id": client_id, "reason": decision.reason, "status": decision.status_code}
        if decision.kind is DenialKind.MISCONFIGURED:
            LOGGER.error("API_KEY is not configured; refusing request", extra=extra)
        else:
            LOGGER.warning("request rejected", extra=extra)

    def _finish(self, request: Request, response: Response, client_id: str, started: float) -> Response:
        LOGGER.info(
            "request completed",
            extra={
                "client_id": client_id,
                "request_id": getattr(request.state, "request_id", None),
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response
