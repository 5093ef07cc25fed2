"""Session resolution and FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to turn the inbound
Authorization header into the acting user.

- SessionResolver.resolve: header → User or None. Never raises for a
  missing, malformed, or expired token; those are all "anonymous".
- get_current_user_optional: the "soft" dependency (None if anonymous).
- get_current_user: the "hard" dependency (AuthenticationRequired → 401).
"""

import uuid
from functools import lru_cache
from typing import Optional

import structlog
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.jwt import TokenCodec, TokenError
from taskboard.config import settings
from taskboard.db.engine import get_db
from taskboard.db.models import User
from taskboard.errors import AuthenticationRequired

logger = structlog.get_logger()

_BEARER_SCHEME = "bearer"


@lru_cache
def get_token_codec() -> TokenCodec:
    """FastAPI dependency: the process-wide codec, built from settings."""
    return TokenCodec(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_days=settings.token_expire_days,
    )


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the token out of an Authorization header value.

    Accepts both "Bearer <token>" and a bare token, since the mobile client
    sends the raw token. A scheme with nothing after it carries no token.
    """
    if not authorization:
        return None
    value = authorization.lstrip()
    scheme, rest = value[: len(_BEARER_SCHEME)], value[len(_BEARER_SCHEME) :]
    if scheme.lower() == _BEARER_SCHEME and (not rest or rest[0].isspace()):
        value = rest
    return value.strip() or None


class SessionResolver:
    """Resolve the acting user from an Authorization header."""

    def __init__(self, db: AsyncSession, codec: TokenCodec):
        self.db = db
        self.codec = codec

    async def resolve(self, authorization: Optional[str]) -> Optional[User]:
        token = extract_token(authorization)
        if token is None:
            return None

        try:
            user_id = self.codec.verify(token)
        except TokenError as e:
            logger.debug("session.invalid_token", error=str(e))
            return None
        if user_id is None:
            return None

        try:
            key = uuid.UUID(user_id)
        except ValueError:
            logger.debug("session.malformed_subject", subject=user_id)
            return None

        user = await self.db.get(User, key)
        if user is None:
            # Token outlived its user
            logger.debug("session.unknown_user", user_id=user_id)
            return None

        structlog.contextvars.bind_contextvars(user_id=user_id)
        return user


async def get_current_user_optional(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
) -> Optional[User]:
    """Resolve the current user (optional: None when anonymous)."""
    return await SessionResolver(db, codec).resolve(authorization)


async def get_current_user(
    user: Optional[User] = Depends(get_current_user_optional),
) -> User:
    """Resolve the current user (required: 401 when anonymous)."""
    if user is None:
        raise AuthenticationRequired()
    return user
