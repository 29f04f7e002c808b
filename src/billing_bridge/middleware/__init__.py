"""Request pipeline middleware."""

from billing_bridge.middleware.rate_limit import FixedWindowRateLimiter, RateLimitMiddleware
from billing_bridge.middleware.request_logging import RequestLoggingMiddleware
from billing_bridge.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "FixedWindowRateLimiter",
    "RateLimitMiddleware",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
]
