# FILE: assignment_hub/services/correlation.py
"""
Correlation ID utilities

The id for the current request lives in a context variable so log lines from
the registry, assembler and feedback requester can be tied together.
"""
import uuid
from contextvars import ContextVar
from typing import Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    """Generate unique correlation ID"""
    return str(uuid.uuid4())


def get_correlation_id() -> str:
    """Get the current correlation ID, creating one outside a request"""
    current = _correlation_id.get()
    if current is None:
        current = generate_correlation_id()
        _correlation_id.set(current)
    return current


def set_correlation_id(value: Optional[str]):
    """Bind a correlation ID to the current context; returns a reset token"""
    return _correlation_id.set(value or generate_correlation_id())


def reset_correlation_id(token):
    _correlation_id.reset(token)
