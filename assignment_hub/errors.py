# FILE: assignment_hub/errors.py
"""
Domain errors raised by the generation and grading core

Malformed model output is not an error here: the sanitizer folds it into an
empty GenerationResult. Feedback failures are recovered locally as well.
"""
from typing import Any, Optional


class AssignmentHubError(Exception):
    """Base class for errors surfaced to callers"""

    status_code: int = 500

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class GenerationFailed(AssignmentHubError):
    """No usable assignment could be produced; the caller may retry"""

    status_code = 502


class LLMUnavailableError(RuntimeError):
    """Every configured model provider failed or none is initialized"""


class StoreUnavailable(AssignmentHubError):
    """A document store read or write failed"""

    status_code = 503


class AssignmentNotFound(AssignmentHubError):
    status_code = 404


class StudentNotFound(AssignmentHubError):
    status_code = 404


class InvalidStatusTransition(AssignmentHubError):
    """Lifecycle status may only move forward"""

    status_code = 409


class VersionConflict(AssignmentHubError):
    """The record changed since the caller read it"""

    status_code = 409
