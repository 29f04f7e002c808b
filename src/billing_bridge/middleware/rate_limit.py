"""Fixed-window rate limiting.

The policy (FixedWindowRateLimiter) is independent of the transport so it
can be tested and swapped on its own; RateLimitMiddleware applies it to a
path prefix.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


@dataclass
class RateLimitDecision:
    """Outcome of a single hit against the limiter."""

    allowed: bool
    limit: int
    remaining: int
    reset_after: float  # seconds until the current window ends


class FixedWindowRateLimiter:
    """Allow at most ``max_requests`` per client in each window."""

    # Drop expired windows once this many clients are tracked
    PRUNE_THRESHOLD = 10000

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 900,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: dict[str, tuple[float, int]] = {}

    def hit(self, key: str) -> RateLimitDecision:
        """Record a request for ``key`` and decide whether it is allowed."""
        now = self.clock()

        if len(self._windows) >= self.PRUNE_THRESHOLD:
            self._prune(now)

        started, count = self._windows.get(key, (now, 0))
        if now - started >= self.window_seconds:
            started, count = now, 0

        reset_after = self.window_seconds - (now - started)

        if count >= self.max_requests:
            self._windows[key] = (started, count)
            return RateLimitDecision(False, self.max_requests, 0, reset_after)

        count += 1
        self._windows[key] = (started, count)
        return RateLimitDecision(True, self.max_requests, self.max_requests - count, reset_after)

    def reset(self) -> None:
        self._windows.clear()

    def _prune(self, now: float) -> None:
        expired = [
            key for key, (started, _) in self._windows.items()
            if now - started >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply a FixedWindowRateLimiter to requests under ``path_prefix``.

    Clients are keyed by remote address.
    """

    def __init__(
        self,
        app,
        limiter: FixedWindowRateLimiter,
        path_prefix: str = "/api/",
    ) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        decision = self.limiter.hit(client)

        headers = {
            "X-RateLimit-Limit": str(decision.limit),
            "X-RateLimit-Remaining": str(decision.remaining),
        }

        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {client} on {request.url.path}")
            headers["Retry-After"] = str(max(1, math.ceil(decision.reset_after)))
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": RATE_LIMIT_MESSAGE},
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
