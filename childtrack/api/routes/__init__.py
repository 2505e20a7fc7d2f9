"""Routes package: exports every FastAPI router."""

from .children import router as children_router
from .events import router as events_router
from .health import router as health_router
from .reports import router as reports_router
from .stats import router as stats_router

__all__ = ["health_router", "children_router", "events_router", "stats_router", "reports_router"]
