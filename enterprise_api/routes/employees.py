"""Employee directory endpoints."""
from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from enterprise_api.dependencies import get_employee_store
from enterprise_api.gate import RequestContext, get_request_context
from enterprise_api.models import EmployeeCreate
from enterprise_api.responses import error_response
from enterprise_api.store import RecordStore
from enterprise_api.utils import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    matches_any,
    paginate,
    sort_records,
    today_iso,
    within_range,
)

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/employees", tags=["employees"])

SEARCH_FIELDS = ("name", "role", "email")
REQUIRED_FIELDS = ["name", "role"]


@router.get("")
def list_employees(
    search: Optional[str] = Query(None, description="Substring matched against name, role and email."),
    department: Optional[str] = Query(None),
    status: Optional[Literal["active", "inactive"]] = Query(None),
    min_salary: Optional[float] = Query(None, ge=0, alias="minSalary"),
    max_salary: Optional[float] = Query(None, ge=0, alias="maxSalary"),
    sort_by: Optional[Literal["name", "role", "department", "salary", "startDate"]] = Query(
        None, alias="sortBy"
    ),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    store: RecordStore = Depends(get_employee_store),
) -> dict:
    """List employees with filtering, sorting and pagination."""

    employees = store.all()

    needle = (search or "").strip()
    if needle:
        employees = [emp for emp in employees if matches_any(emp, SEARCH_FIELDS, needle)]

    department_filter = (department or "").strip().lower()
    if department_filter:
        employees = [
            emp for emp in employees if (emp.get("department") or "").lower() == department_filter
        ]

    if status:
        employees = [emp for emp in employees if emp.get("status") == status]

    if min_salary is not None or max_salary is not None:
        employees = [
            emp for emp in employees if within_range(emp.get("salary"), min_salary, max_salary)
        ]

    employees = sort_records(employees, sort_by, sort_order)

    return {"success": True, **paginate(employees, page, limit)}


@router.get("/{employee_id}")
def get_employee(employee_id: int, store: RecordStore = Depends(get_employee_store)):
    employee = store.get(employee_id)
    if employee is None:
        return error_response(
            404, "Employee not found", f"No employee found with ID: {employee_id}"
        )
    return {"success": True, "data": employee}


@router.post("", status_code=201)
def create_employee(
    payload: EmployeeCreate,
    store: RecordStore = Depends(get_employee_store),
    context: RequestContext = Depends(get_request_context),
):
    missing = payload.missing(REQUIRED_FIELDS)
    if missing:
        return error_response(
            400,
            "Missing required fields",
            f"Missing: {', '.join(missing)}",
            required=REQUIRED_FIELDS,
        )

    fields = {
        "department": "Unassigned",
        "email": None,
        "salary": 0,
        "status": "active",
        "startDate": today_iso(),
        **payload.provided(),
    }
    employee = store.add(fields)
    LOGGER.info(
        "employee created",
        extra={"client_id": context.client_id, "request_id": context.request_id},
    )
    return JSONResponse(
        status_code=201,
        content={"success": True, "data": employee, "message": "Employee created successfully"},
    )
