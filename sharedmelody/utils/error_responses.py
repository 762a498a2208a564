"""Builders for the ``{"success": false, "message": ...}`` error envelope.

Every exception handler funnels through :func:`build_error_response` so the
body shape stays identical no matter where the failure originated. The
request identifier travels in the ``X-Request-ID`` header rather than in the
body, keeping the envelope exactly two keys wide.
"""

from __future__ import annotations

from fastapi.responses import JSONResponse

from sharedmelody.schemas.envelope import error_envelope
from sharedmelody.utils.request_context import REQUEST_ID_HEADER, get_request_id

__all__ = ["build_error_response"]


def build_error_response(
    *,
    message: str,
    status_code: int,
    retry_after: int | None = None,
    request_id: str | None = None,
) -> JSONResponse:
    """Render the error envelope with request-id and retry headers attached."""

    headers: dict[str, str] = {}
    resolved_request_id = request_id or get_request_id()
    if resolved_request_id:
        headers[REQUEST_ID_HEADER] = resolved_request_id
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)

    return JSONResponse(
        status_code=status_code,
        content=error_envelope(message),
        headers=headers or None,
    )
