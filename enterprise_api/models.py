"""Request bodies accepted by the record endpoints."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class _Payload(BaseModel):
    def missing(self, required: List[str]) -> List[str]:
        return [name for name in required if not (getattr(self, name) or "").strip()]

    def provided(self) -> Dict[str, Any]:
        """Fields the client sent, JSON-ready, with blank strings dropped."""

        values = self.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        return {
            key: value.strip() if isinstance(value, str) else value
            for key, value in values.items()
            if not (isinstance(value, str) and not value.strip())
        }


class EmployeeCreate(_Payload):
    name: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None
    email: Optional[str] = None
    salary: Optional[int] = Field(None, ge=0)
    status: Optional[Literal["active", "inactive"]] = None
    startDate: Optional[date] = None


class DepartmentCreate(_Payload):
    name: Optional[str] = None
    description: Optional[str] = None
    manager: Optional[str] = None
    budget: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None


class DepartmentUpdate(DepartmentCreate):
    """Same fields as creation; only those present are applied."""
