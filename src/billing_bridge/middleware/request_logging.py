"""Request logging middleware."""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


def _describe(request: Request) -> str:
    """Method, path and caller address, plus x-request-id when sent."""
    client = request.client.host if request.client else "unknown"
    line = f"{request.method} {request.url.path} from {client}"
    request_id = request.headers.get("x-request-id")
    if request_id:
        line += f" [{request_id}]"
    return line


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One line per request and one per response, with elapsed time.

    Installed only when LOG_REQUESTS is true. Server errors log at WARNING.
    """

    async def dispatch(self, request: Request, call_next):
        described = _describe(request)
        started = time.perf_counter()
        logger.info(f"-> {described}")

        try:
            response = await call_next(request)
        except Exception:
            elapsed = (time.perf_counter() - started) * 1000
            logger.exception(f"<- {described} raised after {elapsed:.1f}ms")
            raise

        elapsed = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, f"<- {described} {response.status_code} in {elapsed:.1f}ms")
        return response
