from .auth import AuthMiddleware
from .errors import (
    data_access_error_handler,
    http_exception_handler,
    problem_response,
    unhandled_exception_handler,
)

__all__ = [
    "AuthMiddleware",
    "data_access_error_handler",
    "http_exception_handler",
    "problem_response",
    "unhandled_exception_handler",
]
