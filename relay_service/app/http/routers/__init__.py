from relay_service.app.http.routers.health import router as health_router
from relay_service.app.http.routers.messages import router as messages_router

__all__ = ["health_router", "messages_router"]
