"""Security headers middleware.

Learn: The API serves JSON to a mobile app and the CLI, never HTML, so
its responses can lock the browser down completely:
- X-Content-Type-Options / X-Frame-Options / Referrer-Policy on everything
- Content-Security-Policy "default-src 'none'" on /api responses, so a
  JSON body opened in a browser can load or run nothing
- Cache-Control: no-store on /api responses, which carry per-user data
- Strict-Transport-Security on HTTPS connections when hsts_max_age > 0

The interactive docs (/docs, /redoc) need scripts and styles from a CDN,
so they only get the baseline headers.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

BASELINE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}

API_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Permissions-Policy": "camera=(), geolocation=(), microphone=()",
}

API_PREFIX = "/api/"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers; the strict set only on API routes."""

    def __init__(self, app: ASGIApp, hsts_max_age: int = 31536000):
        super().__init__(app)
        self.hsts = (
            f"max-age={hsts_max_age}; includeSubDomains" if hsts_max_age > 0 else None
        )

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update(BASELINE_HEADERS)

        if request.url.path.startswith(API_PREFIX):
            response.headers.update(API_HEADERS)
            if "cache-control" not in response.headers:
                response.headers["Cache-Control"] = "no-store"

        if self.hsts and request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = self.hsts
        return response
