"""FastAPI dependencies resolving the authenticated principal."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sharedmelody.db.connection import get_db
from sharedmelody.db.models import User
from sharedmelody.errors import authentication_error
from sharedmelody.security import decode_user_id

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: int
    username: str
    email: str
    role: str


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db),
) -> AuthenticatedUser:
    """Resolve the bearer token into an active user or fail with ``401``."""

    if credentials is None or not credentials.credentials:
        raise authentication_error("Usuario no autenticado")

    user_id = decode_user_id(credentials.credentials)

    query = select(User).where(User.user_id == user_id, User.is_active.is_(True))
    user = (await session.execute(query)).scalar_one_or_none()
    if user is None:
        logger.info("Rejected token for missing or inactive user %s", user_id)
        raise authentication_error("Usuario no encontrado o inactivo")

    return AuthenticatedUser(
        user_id=user.user_id,
        username=user.username,
        email=user.email,
        role=user.role,
    )
