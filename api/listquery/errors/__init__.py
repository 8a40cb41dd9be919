"""Error handling module for the List Query API."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    InternalServerError,
    ServiceUnavailableError,
    QueryValidationError,
    StoreError,
    ConversionError,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "BadRequestError",
    "ForbiddenError",
    "NotFoundError",
    "InternalServerError",
    "ServiceUnavailableError",
    "QueryValidationError",
    "StoreError",
    "ConversionError",
    "create_problem_response",
    "register_exception_handlers"
]
