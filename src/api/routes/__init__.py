"""API route modules."""

from .health import router as health_router
from .projects import router as projects_router
from .queries import router as queries_router
from .timer import router as timer_router

__all__ = ["health_router", "queries_router", "timer_router", "projects_router"]
