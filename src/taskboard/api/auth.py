"""Auth API: sign-up, sign-in, current user.

Learn: Routes for user authentication:
- POST /auth/sign-up → create an account, returns {user, token}
- POST /auth/sign-in → email/password → {user, token}
- GET /auth/me → the user behind the presented token

Tokens are valid for seven days. There is no refresh endpoint; the
client signs in again when a token expires.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import get_current_user, get_token_codec
from taskboard.auth.jwt import TokenCodec
from taskboard.db.engine import get_db
from taskboard.db.models import User
from taskboard.schemas.auth import AuthUser, SignInInput, SignUpInput, UserRead
from taskboard.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


def _svc(
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
) -> AuthService:
    return AuthService(db, codec)


@router.post("/sign-up", response_model=AuthUser, status_code=201)
async def sign_up(body: SignUpInput, svc: AuthService = Depends(_svc)):
    """Create a new account and sign it in."""
    result = await svc.sign_up(
        email=body.email,
        password=body.password,
        name=body.name,
        avatar=body.avatar,
    )
    return AuthUser(user=UserRead.model_validate(result.user), token=result.token)


@router.post("/sign-in", response_model=AuthUser)
async def sign_in(body: SignInInput, svc: AuthService = Depends(_svc)):
    result = await svc.sign_in(email=body.email, password=body.password)
    return AuthUser(user=UserRead.model_validate(result.user), token=result.token)


@router.get("/me", response_model=UserRead)
async def get_me(user: User = Depends(get_current_user)):
    """Get the current authenticated user's info."""
    return user
