"""Bearer access-token helpers.

Tokens are HS256 JWTs carrying the numeric user id in a ``userId`` claim, the
format issued by the SharedMelody login flow. ``sub`` is accepted as a
fallback so tokens minted by standard tooling also verify.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from sharedmelody.db.models import INTEGER_KEY_MAX
from sharedmelody.errors import authentication_error
from sharedmelody.settings import get_settings

DEFAULT_TOKEN_LIFETIME = timedelta(hours=24)


def create_access_token(
    user_id: int,
    *,
    expires_delta: timedelta = DEFAULT_TOKEN_LIFETIME,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    settings = get_settings()
    claims: dict[str, Any] = {
        "userId": user_id,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    if extra_claims:
        claims.update(extra_claims)
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_user_id(token: str) -> int:
    """Verify ``token`` and return the user id it was issued for.

    Raises an authentication :class:`~sharedmelody.errors.ApiError` for
    expired, tampered or malformed tokens.
    """

    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise authentication_error("Token expirado") from exc
    except JWTError as exc:
        raise authentication_error("Token inválido") from exc

    raw_user_id = payload.get("userId")
    if raw_user_id is None:
        raw_user_id = payload.get("sub")
    try:
        user_id = int(raw_user_id)
    except (TypeError, ValueError) as exc:
        raise authentication_error("Token inválido") from exc
    if not 1 <= user_id <= INTEGER_KEY_MAX:
        raise authentication_error("Token inválido")
    return user_id
