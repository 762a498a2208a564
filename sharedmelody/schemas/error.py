"""Error taxonomy shared by the service layer and the exception handlers."""

from enum import Enum


class ErrorType(str, Enum):
    """Types of errors that can occur."""

    VALIDATION_ERROR = "validation_error"
    AUTHENTICATION_ERROR = "authentication_error"
    NOT_FOUND = "not_found"
    INTERNAL_ERROR = "internal_error"
