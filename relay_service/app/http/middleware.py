import time
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

from relay_service.core.logging import logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request on entry and exit, and turns stray exceptions into a 500."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        path = request.url.path
        client = request.client.host if request.client else "-"
        logger.info(f" {path} | {client}")
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(f"unexpected error: {e}")
            response = PlainTextResponse(str(e), status_code=500)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f" {path} | {client} | {elapsed_ms:.1f}ms | {response.status_code}")
        return response
