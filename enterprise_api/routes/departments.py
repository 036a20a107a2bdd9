"""Department endpoints, including the budget analysis report."""
from __future__ import annotations

import logging
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from enterprise_api.dependencies import get_department_store
from enterprise_api.gate import RequestContext, get_request_context
from enterprise_api.models import DepartmentCreate, DepartmentUpdate
from enterprise_api.responses import error_response
from enterprise_api.store import RecordStore
from enterprise_api.utils import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    contains_text,
    paginate,
    round_half_up,
    sort_records,
    today_iso,
    within_range,
)

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/departments", tags=["departments"])

REQUIRED_FIELDS = ["name", "description", "manager"]


def _not_found(department_id: int) -> JSONResponse:
    return error_response(
        404, "Department not found", f"No department found with ID: {department_id}"
    )


def _duplicate_of(store: RecordStore, name: str, exclude_id: Optional[int] = None) -> Optional[JSONResponse]:
    """Return a 409 response when another department already uses ``name``."""

    wanted = name.lower()
    duplicate = store.find_first(
        lambda dept: dept["name"].lower() == wanted and dept["id"] != exclude_id
    )
    if duplicate is None:
        return None
    return error_response(
        409,
        "Department with this name already exists",
        f"A department named {duplicate['name']!r} already exists (ID: {duplicate['id']})",
    )


@router.get("")
def list_departments(
    location: Optional[str] = Query(None, description="Case-insensitive substring of the location."),
    min_budget: Optional[float] = Query(None, ge=0, alias="minBudget"),
    max_budget: Optional[float] = Query(None, ge=0, alias="maxBudget"),
    sort_by: Optional[Literal["name", "budget", "employeeCount", "established", "location"]] = Query(
        None, alias="sortBy"
    ),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    store: RecordStore = Depends(get_department_store),
) -> dict:
    """List departments with filtering, sorting and pagination."""

    departments = store.all()

    if location and location.strip():
        departments = [dept for dept in departments if contains_text(dept.get("location"), location)]

    if min_budget is not None or max_budget is not None:
        departments = [
            dept for dept in departments if within_range(dept.get("budget"), min_budget, max_budget)
        ]

    departments = sort_records(departments, sort_by, sort_order)

    return {"success": True, **paginate(departments, page, limit)}


@router.get("/analysis/budget")
def budget_analysis(store: RecordStore = Depends(get_department_store)) -> dict:
    """Summarise budgets across all departments."""

    departments = store.all()
    budgets = [dept.get("budget") or 0 for dept in departments]
    total = sum(budgets)

    by_location: Dict[str, Any] = {}
    for dept in departments:
        by_location[dept["location"]] = by_location.get(dept["location"], 0) + (dept.get("budget") or 0)

    distribution = [
        {
            "name": dept["name"],
            "budget": dept.get("budget") or 0,
            "percentage": round_half_up((dept.get("budget") or 0) / total * 100) if total else 0,
        }
        for dept in departments
    ]

    return {
        "success": True,
        "data": {
            "totalBudget": total,
            "averageBudget": round_half_up(total / len(budgets)) if budgets else 0,
            "maxBudget": max(budgets, default=0),
            "minBudget": min(budgets, default=0),
            "totalDepartments": len(departments),
            "budgetByLocation": by_location,
            "budgetDistribution": distribution,
        },
    }


@router.get("/{department_id}")
def get_department(department_id: int, store: RecordStore = Depends(get_department_store)):
    department = store.get(department_id)
    if department is None:
        return _not_found(department_id)
    return {"success": True, "data": department}


@router.post("", status_code=201)
def create_department(
    payload: DepartmentCreate,
    store: RecordStore = Depends(get_department_store),
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

    fields = {"budget": 0, "employeeCount": 0, "location": "Not specified", **payload.provided()}
    conflict = _duplicate_of(store, fields["name"])
    if conflict is not None:
        return conflict

    department = store.add({**fields, "established": today_iso()})
    LOGGER.info(
        "department created",
        extra={"client_id": context.client_id, "request_id": context.request_id},
    )
    return JSONResponse(
        status_code=201,
        content={"success": True, "data": department, "message": "Department created successfully"},
    )


@router.put("/{department_id}")
def update_department(
    department_id: int,
    payload: DepartmentUpdate,
    store: RecordStore = Depends(get_department_store),
):
    if store.get(department_id) is None:
        return _not_found(department_id)

    changes = payload.provided()
    if "name" in changes:
        conflict = _duplicate_of(store, changes["name"], exclude_id=department_id)
        if conflict is not None:
            return conflict

    updated = store.update(department_id, changes)
    if updated is None:
        return _not_found(department_id)
    return {"success": True, "data": updated, "message": "Department updated successfully"}


@router.delete("/{department_id}")
def delete_department(department_id: int, store: RecordStore = Depends(get_department_store)):
    deleted = store.delete(department_id)
    if deleted is None:
        return _not_found(department_id)
    return {"success": True, "message": "Department deleted successfully", "data": deleted}
