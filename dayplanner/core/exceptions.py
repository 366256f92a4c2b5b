"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class DayPlannerError(Exception):
    """Base exception for dayplanner."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(DayPlannerError):
    """Resource not found."""

    pass


class ValidationError(DayPlannerError):
    """Invalid planning input (rejected before scheduling begins)."""

    pass


class InfrastructureError(DayPlannerError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass


class BusinessLogicError(DayPlannerError):
    """Business logic constraint violation."""

    pass
