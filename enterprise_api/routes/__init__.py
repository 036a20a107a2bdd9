"""HTTP routers for the record endpoints."""
from .departments import router as departments_router  # noqa: F401
from .employees import router as employees_router  # noqa: F401
