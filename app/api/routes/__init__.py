from app.api.routes.admin import router as admin_router
from app.api.routes.health import router as health_router

__all__ = ["admin_router", "health_router"]
