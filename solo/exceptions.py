"""
Application exception hierarchy.

    SoloError (base)
    ├── NotFoundError     a looked-up row does not exist
    └── ValidationError   input rejected by a business rule

Database failures are not wrapped: SQLAlchemy exceptions reach the caller
unchanged after the enclosing transaction has been rolled back.
"""

from typing import Any, Dict, Optional


class SoloError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Human-readable error description.
        context:  Additional debug info for logging.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(SoloError):
    """
    Raised when a row required by an operation does not exist.

    Lets callers branch on absence without inspecting database errors;
    ``resource`` names the missing entity ("article", "user", "statistic")
    and ``resource_id`` carries the identifier that was looked up.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Any = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id is not None:
                message = f"The requested {resource} [id={resource_id}] was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ValidationError(SoloError, ValueError):
    """
    Raised when input fails a business rule; ``field`` names the offender.

    Also a ``ValueError`` so pydantic validators can raise it directly and
    have it reported as a field error.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
