"""Thread-safe in-memory record tables."""
from __future__ import annotations

import copy
from threading import Lock
from typing import Any, Callable, Dict, Iterable, List, Optional

Record = Dict[str, Any]

DEFAULT_EMPLOYEES: List[Record] = [
    {
        "id": 1,
        "name": "Alice",
        "role": "Engineer",
        "department": "Engineering",
        "email": "alice@example.com",
        "salary": 125000,
        "status": "active",
        "startDate": "2021-02-01",
    },
    {
        "id": 2,
        "name": "Bob",
        "role": "Manager",
        "department": "Engineering",
        "email": "bob@example.com",
        "salary": 150000,
        "status": "active",
        "startDate": "2020-01-15",
    },
    {
        "id": 3,
        "name": "Carol",
        "role": "Product Manager",
        "department": "Product",
        "email": "carol@example.com",
        "salary": 140000,
        "status": "active",
        "startDate": "2021-03-15",
    },
    {
        "id": 4,
        "name": "David",
        "role": "Marketing Lead",
        "department": "Marketing",
        "email": "david@example.com",
        "salary": 110000,
        "status": "inactive",
        "startDate": "2020-06-01",
    },
]

DEFAULT_DEPARTMENTS: List[Record] = [
    {
        "id": 1,
        "name": "Engineering",
        "description": "Software development and technical operations",
        "manager": "Bob Smith",
        "budget": 2500000,
        "employeeCount": 25,
        "location": "San Francisco, CA",
        "established": "2020-01-01",
    },
    {
        "id": 2,
        "name": "Product",
        "description": "Product strategy and management",
        "manager": "Carol Davis",
        "budget": 1200000,
        "employeeCount": 8,
        "location": "New York, NY",
        "established": "2021-03-15",
    },
    {
        "id": 3,
        "name": "Marketing",
        "description": "Brand management and customer acquisition",
        "manager": "David Wilson",
        "budget": 800000,
        "employeeCount": 12,
        "location": "Los Angeles, CA",
        "established": "2020-06-01",
    },
]


class RecordStore:
    """A list of dict records keyed by integer ``id``.

    Reads hand out copies so callers can never mutate stored rows
    without going through ``update``.
    """

    def __init__(self, records: Iterable[Record] = ()) -> None:
        self._records: List[Record] = [copy.deepcopy(record) for record in records]
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._records)

    def all(self) -> List[Record]:
        with self._lock:
            return [dict(record) for record in self._records]

    def get(self, record_id: int) -> Optional[Record]:
        with self._lock:
            record = self._find(record_id)
            return dict(record) if record is not None else None

    def find_first(self, predicate: Callable[[Record], bool]) -> Optional[Record]:
        with self._lock:
            for record in self._records:
                if predicate(record):
                    return dict(record)
            return None

    def add(self, fields: Record) -> Record:
        """Insert a record, assigning the next free id."""

        with self._lock:
            next_id = max((record["id"] for record in self._records), default=0) + 1
            record = {"id": next_id, **fields}
            self._records.append(record)
            return dict(record)

    def update(self, record_id: int, changes: Record) -> Optional[Record]:
        with self._lock:
            record = self._find(record_id)
            if record is None:
                return None
            record.update({key: value for key, value in changes.items() if key != "id"})
            return dict(record)

    def delete(self, record_id: int) -> Optional[Record]:
        with self._lock:
            for index, record in enumerate(self._records):
                if record["id"] == record_id:
                    return self._records.pop(index)
            return None

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def _find(self, record_id: int) -> Optional[Record]:
        for record in self._records:
            if record["id"] == record_id:
                return record
        return None


def employee_store() -> RecordStore:
    return RecordStore(DEFAULT_EMPLOYEES)


def department_store() -> RecordStore:
    return RecordStore(DEFAULT_DEPARTMENTS)
