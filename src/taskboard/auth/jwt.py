"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
carries the user id in `sub` and an absolute expiry (`exp`) seven days
after issuance. There are no refresh tokens: when a token expires the
user signs in again.

The codec is an object built with its secret, not a module reading a
global. The app builds one from settings; tests build their own.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt


class TokenError(Exception):
    """Raised when a token is invalid, tampered with, or expired."""


class TokenCodec:
    """Issue and verify signed identity tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_days: int = 7,
    ):
        if not secret:
            raise ValueError("TokenCodec requires a non-empty secret")
        self.secret = secret
        self.algorithm = algorithm
        self.expire_days = expire_days

    def issue(self, user_id: str, now: Optional[datetime] = None) -> str:
        """Create a token for user_id, valid for expire_days."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + timedelta(days=self.expire_days),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Optional[str]:
        """Return the user id embedded in token.

        A missing token means "no identity" and returns None.
        Raises TokenError on a bad signature, a malformed payload,
        or an expired token.
        """
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise TokenError("Invalid token: missing subject")
        return user_id
