"""Error handling module for keyset pagination."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    PaginationError,
    InvalidCursorError,
    InvalidParametersError,
    StoreFailureError
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "PaginationError",
    "InvalidCursorError",
    "InvalidParametersError",
    "StoreFailureError",
    "register_exception_handlers"
]
