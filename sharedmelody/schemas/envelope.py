"""The ``{success, message?, data?}`` envelope shared by every API response."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Response wrapper.

    Routes are declared with ``response_model_exclude_unset=True`` so that
    ``message`` and ``data`` only appear on the wire when a handler sets them.
    """

    success: bool = Field(..., description="False for every error response")
    message: str | None = Field(None, description="User-facing status message")
    data: DataT | None = None


def error_envelope(message: str) -> dict[str, object]:
    """Body used by the exception handlers for failed requests."""

    return {"success": False, "message": message}
