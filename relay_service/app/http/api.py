from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from relay_service import __version__
from relay_service.app.http.middleware import RequestLoggingMiddleware
from relay_service.app.http.routers.health import router as health_router
from relay_service.app.http.routers.messages import router as messages_router
from relay_service.core.logging import logger
from relay_service.protocol.service.adapter_service import AdapterService


def _describe_validation_error(exc: RequestValidationError) -> str:
    details = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        details.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(details)


async def bad_request_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    message = _describe_validation_error(exc)
    logger.error(f"invalid request: {message}")
    return PlainTextResponse(f"bad request: {message}", status_code=400)


def create_app(settings: Optional[Dict[str, Any]] = None, adapter_svc: Optional[AdapterService] = None) -> FastAPI:
    """Create and configure the FastAPI application with DI"""
    from relay_service.core.config import load_settings
    from relay_service.core.factory import ServiceFactory

    if settings is None:
        settings = load_settings()
    if adapter_svc is None:
        adapter_svc = ServiceFactory(settings).get_adapter_service()

    app = FastAPI(title="Relay", version=__version__)
    app.state.adapter_svc = adapter_svc
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(RequestValidationError, bad_request_handler)

    v1_router = APIRouter(prefix="/v1")
    v1_router.include_router(messages_router)

    app.include_router(v1_router)
    app.include_router(health_router)
    return app
