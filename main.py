"""FastAPI application that exposes employee and department records."""
from __future__ import annotations

import logging
import platform
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from enterprise_api.config import Settings, get_settings
from enterprise_api.gate import Clock, RequestGate, get_request_context
from enterprise_api.logging_config import configure_logging
from enterprise_api.rate_limit import RateLimiter
from enterprise_api.responses import RouteNotFoundBody, error_response
from enterprise_api.routes import departments_router, employees_router
from enterprise_api.store import department_store, employee_store
from enterprise_api.utils import format_uptime, utc_now_iso

LOGGER = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

AVAILABLE_ENDPOINTS = [
    "GET /",
    "GET /health",
    "GET /api/employees",
    "GET /api/employees/:id",
    "POST /api/employees",
    "GET /api/departments",
    "GET /api/departments/:id",
    "POST /api/departments",
    "PUT /api/departments/:id",
    "DELETE /api/departments/:id",
    "GET /api/departments/analysis/budget",
]


def api_documentation(settings: Settings) -> dict:
    window_minutes = settings.rate_limit_window_seconds / 60
    window = f"{window_minutes:g} minutes" if window_minutes >= 1 else f"{settings.rate_limit_window_seconds} seconds"
    return {
        "name": settings.service_name,
        "version": settings.version,
        "description": "Employee and department records with filtering, sorting and pagination",
        "endpoints": {
            "health": {"method": "GET", "path": "/health", "description": "Check API health status"},
            "employees": {
                "base": "/api/employees",
                "endpoints": {
                    "list": {
                        "method": "GET",
                        "path": "/",
                        "description": "List employees",
                        "queryParams": "search, department, status, minSalary, maxSalary, sortBy, sortOrder, page, limit",
                    },
                    "get": {"method": "GET", "path": "/:id", "description": "Get a single employee"},
                    "create": {"method": "POST", "path": "/", "description": "Add an employee"},
                },
            },
            "departments": {
                "base": "/api/departments",
                "endpoints": {
                    "list": {
                        "method": "GET",
                        "path": "/",
                        "description": "List departments",
                        "queryParams": "location, minBudget, maxBudget, sortBy, sortOrder, page, limit",
                    },
                    "get": {"method": "GET", "path": "/:id", "description": "Get a single department"},
                    "create": {"method": "POST", "path": "/", "description": "Create a department"},
                    "update": {"method": "PUT", "path": "/:id", "description": "Update a department"},
                    "delete": {"method": "DELETE", "path": "/:id", "description": "Delete a department"},
                    "budgetAnalysis": {
                        "method": "GET",
                        "path": "/analysis/budget",
                        "description": "Budget totals, averages and distribution",
                    },
                },
            },
        },
        "authentication": {
            "type": "API Key",
            "header": "x-api-key",
            "description": "Include your API key in the x-api-key header",
        },
        "rateLimit": {
            "window": window,
            "maxRequests": settings.rate_limit_requests,
            "headers": ["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
        },
    }


def create_app(settings: Optional[Settings] = None, *, clock: Clock = time.time) -> FastAPI:
    """Build an application with its own rate limiter and record tables."""

    settings = settings or get_settings()
    rate_limiter = RateLimiter(
        settings.rate_limit_requests,
        settings.rate_limit_window_seconds,
        sweep_every=settings.rate_limit_sweep_every,
    )
    started_at = time.monotonic()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.api_key:
            LOGGER.error("API_KEY is not set; every /api request will be refused")
        LOGGER.info("service started in %s environment", settings.environment)
        yield
        rate_limiter.clear()
        app.state.employees.clear()
        app.state.departments.clear()
        LOGGER.info("service stopped")

    app = FastAPI(title=settings.service_name, version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.rate_limiter = rate_limiter
    app.state.employees = employee_store()
    app.state.departments = department_store()

    # Starlette runs the most recently added middleware first: CORS, then
    # security headers, then the gate.
    app.middleware("http")(RequestGate(settings, rate_limiter, clock=clock))

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):  # type: ignore[override]
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "x-api-key"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            body = RouteNotFoundBody(
                error="Route Not Found",
                message=f"Cannot {request.method} {request.url.path}",
                availableEndpoints=AVAILABLE_ENDPOINTS,
                requestId=get_request_context(request).request_id or None,
            )
            return JSONResponse(status_code=404, content=body.model_dump())
        return error_response(exc.status_code, str(exc.detail), str(exc.detail), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]
        return error_response(
            400, "Validation Error", "The request parameters are invalid.", details=details
        )

    @app.get("/")
    async def index() -> dict:
        """Describe the API."""

        return api_documentation(settings)

    @app.get("/health")
    async def health(request: Request) -> dict:
        """Report liveness along with basic runtime information."""

        uptime = time.monotonic() - started_at
        return {
            "status": "UP",
            "service": settings.service_name,
            "version": settings.version,
            "timestamp": utc_now_iso(),
            "uptime": {"seconds": int(uptime), "human": format_uptime(uptime)},
            "environment": settings.environment,
            "pythonVersion": platform.python_version(),
            "requestId": get_request_context(request).request_id,
        }

    app.include_router(employees_router)
    app.include_router(departments_router)
    return app


settings = get_settings()
configure_logging(settings.log_level)
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    LOGGER.info("starting server on port %d", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
