"""FastAPI dependencies shared by the routers."""
from __future__ import annotations

from fastapi import Request

from enterprise_api.store import RecordStore


def get_employee_store(request: Request) -> RecordStore:
    """Provide the application's employee table."""

    return request.app.state.employees


def get_department_store(request: Request) -> RecordStore:
    """Provide the application's department table."""

    return request.app.state.departments
