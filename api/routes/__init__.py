"""API route modules."""

from api.routes.health import router as health_router
from api.routes.provision import router as provision_router
from api.routes.tools import router as tools_router

__all__ = ["health_router", "provision_router", "tools_router"]
