"""Auth service: sign-up and sign-in.

Learn: Service layer separates business logic from HTTP routing.
Routes call services, services call the database and raise domain errors
(taskboard.errors) that main.py maps to status codes.

Sign-up does not look the email up first. The unique constraint on
users.email is the single source of truth, so two concurrent sign-ups
with the same email cannot both succeed; the loser gets
EmailAlreadyRegistered.
"""

from functools import lru_cache
from typing import NamedTuple, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.jwt import TokenCodec
from taskboard.auth.password import hash_password, verify_password
from taskboard.db.models import User
from taskboard.errors import EmailAlreadyRegistered, InvalidCredentials

logger = structlog.get_logger()


@lru_cache
def _dummy_hash() -> str:
    """A hash at the configured work factor, checked when the email is unknown."""
    return hash_password("taskboard-unknown-account")


class AuthResult(NamedTuple):
    user: User
    token: str


class AuthService:
    """Business logic for account creation and credential checks."""

    def __init__(self, db: AsyncSession, codec: TokenCodec):
        self.db = db
        self.codec = codec

    async def sign_up(
        self,
        email: str,
        password: str,
        name: str,
        avatar: Optional[str] = None,
    ) -> AuthResult:
        user = User(
            email=email,
            name=name,
            password_hash=hash_password(password),
            avatar=avatar,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("auth.sign_up_rejected", reason="email_taken")
            raise EmailAlreadyRegistered()

        logger.info("auth.signed_up", user_id=str(user.id))
        return AuthResult(user=user, token=self.codec.issue(str(user.id)))

    async def sign_in(self, email: str, password: str) -> AuthResult:
        """Check credentials and issue a fresh token.

        Unknown email and wrong password raise the same error with the
        same message and the same bcrypt cost, so callers cannot tell which
        emails exist.
        """
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalars().first()

        # An unknown email still pays for one bcrypt check
        stored_hash = user.password_hash if user is not None else _dummy_hash()
        if not verify_password(password, stored_hash) or user is None:
            logger.info("auth.sign_in_failed")
            raise InvalidCredentials()

        logger.info("auth.signed_in", user_id=str(user.id))
        return AuthResult(user=user, token=self.codec.issue(str(user.id)))
