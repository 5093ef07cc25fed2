"""SessionResolver tests: header → user or anonymous.

Learn: Resolution never raises. Every failure mode (no header, bad
token, expired token, deleted user) comes back as None, and it is the
protected operation that turns None into a 401.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import delete

from taskboard.auth.dependencies import SessionResolver, extract_token
from taskboard.auth.jwt import TokenCodec
from taskboard.auth.password import hash_password
from taskboard.db.models import User


@pytest_asyncio.fixture()
async def user(db_session):
    u = User(
        email=f"resolver-{uuid.uuid4().hex[:8]}@example.com",
        name="Resolver User",
        password_hash=hash_password("password_123", rounds=4),
    )
    db_session.add(u)
    await db_session.commit()
    return u


def test_extract_token_variants():
    assert extract_token(None) is None
    assert extract_token("") is None
    assert extract_token("Bearer abc.def") == "abc.def"
    assert extract_token("bearer abc.def") == "abc.def"
    assert extract_token("abc.def") == "abc.def"
    assert extract_token("Bearer   ") is None


def test_extract_token_scheme_without_token():
    assert extract_token("Bearer") is None
    assert extract_token("  BEARER  ") is None
    assert extract_token("  Bearer abc.def  ") == "abc.def"
    assert extract_token("BEARER\tabc.def") == "abc.def"
    # No separator after the scheme: this is a raw token
    assert extract_token("Bearerabc.def") == "Bearerabc.def"


@pytest.mark.asyncio
async def test_empty_bearer_header_skips_token_check(db_session, codec, monkeypatch):
    calls = []
    monkeypatch.setattr(codec, "verify", lambda token: calls.append(token))

    resolver = SessionResolver(db_session, codec)
    assert await resolver.resolve("Bearer") is None
    assert await resolver.resolve("Bearer   ") is None
    assert calls == []


@pytest.mark.asyncio
async def test_resolves_user_from_bearer_token(db_session, codec, user):
    resolver = SessionResolver(db_session, codec)
    resolved = await resolver.resolve(f"Bearer {codec.issue(str(user.id))}")
    assert resolved is not None
    assert resolved.id == user.id


@pytest.mark.asyncio
async def test_resolves_user_from_raw_token(db_session, codec, user):
    resolver = SessionResolver(db_session, codec)
    resolved = await resolver.resolve(codec.issue(str(user.id)))
    assert resolved.id == user.id


@pytest.mark.asyncio
async def test_no_header_is_anonymous(db_session, codec):
    assert await SessionResolver(db_session, codec).resolve(None) is None


@pytest.mark.asyncio
async def test_invalid_token_is_anonymous(db_session, codec):
    assert await SessionResolver(db_session, codec).resolve("Bearer garbage") is None


@pytest.mark.asyncio
async def test_expired_token_is_anonymous(db_session, codec, user):
    old = codec.issue(str(user.id), now=datetime.now(timezone.utc) - timedelta(days=30))
    assert await SessionResolver(db_session, codec).resolve(old) is None


@pytest.mark.asyncio
async def test_token_from_other_secret_is_anonymous(db_session, codec, user):
    forged = TokenCodec(secret="attacker").issue(str(user.id))
    assert await SessionResolver(db_session, codec).resolve(forged) is None


@pytest.mark.asyncio
async def test_non_uuid_subject_is_anonymous(db_session, codec):
    token = codec.issue("not-a-uuid")
    assert await SessionResolver(db_session, codec).resolve(token) is None


@pytest.mark.asyncio
async def test_deleted_user_is_anonymous(db_session, codec, user):
    token = codec.issue(str(user.id))
    await db_session.execute(delete(User).where(User.id == user.id))
    await db_session.commit()
    db_session.expunge_all()

    assert await SessionResolver(db_session, codec).resolve(token) is None
