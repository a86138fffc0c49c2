# FILE: assignment_hub/middleware/correlation.py
"""
Correlation ID middleware
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from assignment_hub.services.correlation import (
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)

HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind the caller's X-Correlation-ID (or a fresh one) for the request"""

    async def dispatch(self, request: Request, call_next):
        token = set_correlation_id(request.headers.get(HEADER))
        correlation_id = get_correlation_id()
        try:
            response = await call_next(request)
        finally:
            reset_correlation_id(token)
        response.headers[HEADER] = correlation_id
        return response
