"""Password hashing utilities.

Learn: Uses bcrypt for password hashing. bcrypt salts automatically and
its work factor makes brute force expensive. Verification goes through
bcrypt.checkpw, never a plaintext or plain string comparison.
"""

from typing import Optional

import bcrypt

from taskboard.config import settings

# bcrypt only looks at the first 72 bytes
_MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt.

    Produces a "$2b$..." string with the salt embedded. The work factor
    defaults to settings.bcrypt_rounds (12 in production).
    """
    pw_bytes = password.encode("utf-8")[:_MAX_PASSWORD_BYTES]
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        pw_bytes = password.encode("utf-8")[:_MAX_PASSWORD_BYTES]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        # Corrupt or non-bcrypt hash in the store
        return False
