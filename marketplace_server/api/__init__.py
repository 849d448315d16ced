"""API routes and handlers."""

from .jobs import router as jobs_router
from .health import router as health_router

__all__ = [
    "jobs_router",
    "health_router"
]
