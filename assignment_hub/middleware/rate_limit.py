# FILE: assignment_hub/middleware/rate_limit.py
"""
Rate limiting middleware (simple in-memory)

Only paths that trigger a model call are limited; reads and saves are cheap.
"""
import logging
import time
from collections import defaultdict
from typing import Sequence
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

DEFAULT_LIMITED_SUFFIXES = ("/generate", "/submit", "/topics/suggest", "/topics/explore")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client sliding one-minute window on model-backed endpoints"""

    def __init__(self, app, rpm: int = 10, limited_suffixes: Sequence[str] = DEFAULT_LIMITED_SUFFIXES):
        super().__init__(app)
        self.rpm = rpm
        self.limited_suffixes = tuple(limited_suffixes)
        self.requests = defaultdict(list)

    def _is_limited(self, request: Request) -> bool:
        return request.method == "POST" and request.url.path.rstrip("/").endswith(self.limited_suffixes)

    async def dispatch(self, request: Request, call_next):
        if not self._is_limited(request):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()

        # Clean old entries
        self.requests[client_ip] = [
            ts for ts in self.requests[client_ip]
            if now - ts < 60
        ]

        if len(self.requests[client_ip]) >= self.rpm:
            logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded", "retryable": True}
            )

        self.requests[client_ip].append(now)
        return await call_next(request)
