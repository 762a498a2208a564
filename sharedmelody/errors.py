"""Application error type carrying the HTTP status surfaced to clients.

Messages are user-facing: the exception handlers in :mod:`sharedmelody.main`
copy ``message`` verbatim into the ``{success: false, message}`` envelope.
"""

from __future__ import annotations

from fastapi import status

from sharedmelody.schemas.error import ErrorType

__all__ = [
    "ApiError",
    "authentication_error",
    "internal_error",
    "not_found_error",
    "validation_error",
]


class ApiError(Exception):
    """Operational error with a status code and a client-safe message."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type: ErrorType = ErrorType.INTERNAL_ERROR,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type

    def __repr__(self) -> str:
        return f"ApiError(status_code={self.status_code}, message={self.message!r})"


def validation_error(message: str) -> ApiError:
    return ApiError(message, status.HTTP_400_BAD_REQUEST, ErrorType.VALIDATION_ERROR)


def authentication_error(message: str = "Usuario no autenticado") -> ApiError:
    return ApiError(
        message, status.HTTP_401_UNAUTHORIZED, ErrorType.AUTHENTICATION_ERROR
    )


def not_found_error(message: str) -> ApiError:
    return ApiError(message, status.HTTP_404_NOT_FOUND, ErrorType.NOT_FOUND)


def internal_error(message: str = "Error interno del servidor") -> ApiError:
    return ApiError(
        message, status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorType.INTERNAL_ERROR
    )
