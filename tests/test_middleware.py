"""Tests for middleware: security headers, request IDs."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from taskboard.middleware.security import SecurityHeadersMiddleware


def _bare_app(**middleware_kwargs) -> FastAPI:
    """A tiny app with only the security middleware, for HTTPS checks."""
    bare = FastAPI()

    @bare.get("/api/v1/ping")
    async def ping():
        return {"ok": True}

    bare.add_middleware(SecurityHeadersMiddleware, **middleware_kwargs)
    return bare


@pytest.mark.asyncio
async def test_security_headers_on_health(client):
    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "no-referrer"
    assert r.headers["Content-Security-Policy"].startswith("default-src 'none'")
    assert "camera=()" in r.headers["Permissions-Policy"]
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_docs_get_baseline_headers_only(client):
    """Swagger UI loads scripts from a CDN, so no API CSP there."""
    r = await client.get("/docs")
    assert r.status_code == 200
    assert r.headers["X-Frame-Options"] == "DENY"
    assert "Content-Security-Policy" not in r.headers
    assert "Cache-Control" not in r.headers


@pytest.mark.asyncio
async def test_request_id_generated(client):
    """Each request gets a unique X-Request-ID header."""
    r1 = await client.get("/api/v1/health")
    r2 = await client.get("/api/v1/health")
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    r = await client.get("/api/v1/health", headers={"X-Request-ID": "trace-12345"})
    assert r.headers["X-Request-ID"] == "trace-12345"


@pytest.mark.asyncio
async def test_headers_present_on_rejected_requests(client):
    """Domain errors go through the same middleware stack."""
    r = await client.get("/api/v1/task-lists")
    assert r.status_code == 401
    assert "X-Request-ID" in r.headers
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    r = await client.get("/api/v1/health")
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_hsts_on_https():
    transport = ASGITransport(app=_bare_app(hsts_max_age=600))
    async with AsyncClient(transport=transport, base_url="https://test") as ac:
        r = await ac.get("/api/v1/ping")
    assert r.headers["Strict-Transport-Security"] == "max-age=600; includeSubDomains"


@pytest.mark.asyncio
async def test_hsts_disabled_with_zero_max_age():
    transport = ASGITransport(app=_bare_app(hsts_max_age=0))
    async with AsyncClient(transport=transport, base_url="https://test") as ac:
        r = await ac.get("/api/v1/ping")
    assert "Strict-Transport-Security" not in r.headers
    assert r.headers["X-Content-Type-Options"] == "nosniff"
