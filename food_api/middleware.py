"""
middleware.py – Request-scoped layers around the routes.

Registered in main.create_app; outermost first:
UTF-8 stamping → CORS → security headers → rate limit → response cache.
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from .core.errors import MESSAGES
from .deps import get_cache, get_limiter

logger = logging.getLogger(__name__)

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Content-Security-Policy": (
        "default-src 'none'; script-src 'self'; style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; connect-src 'self'; frame-ancestors 'none'"
    ),
    "Referrer-Policy": "no-referrer",
}


def client_ip(request: Request) -> str:
    """Rightmost X-Forwarded-For entry (set by our reverse proxy), else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        candidates = [part.strip() for part in forwarded.split(",") if part.strip()]
        if candidates:
            return candidates[-1]
    if request.client is not None:
        return request.client.host
    return "unknown"


class Utf8ContentTypeMiddleware(BaseHTTPMiddleware):
    """application/json → application/json; charset=utf-8"""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        content_type = response.headers.get("content-type")
        if content_type and "charset" not in content_type.lower():
            response.headers["content-type"] = f"{content_type}; charset=utf-8"
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """429 once a client IP spends its per-second budget. Cache hits count too."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        ip = client_ip(request)
        if not get_limiter().allow(ip):
            logger.debug(f"Rate limited: {request.method} {request.url.path}, {ip}")
            return JSONResponse(status_code=429, content={"status": 429, "message": MESSAGES["rate_limited"]})
        return await call_next(request)


class ResponseCacheMiddleware(BaseHTTPMiddleware):
    """Replays cached 200 GET responses keyed by the full URL (query string included)."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method != "GET":
            return await call_next(request)

        cache = get_cache()
        key = str(request.url)
        cached = cache.get(key)
        if cached is not None:
            return Response(content=cached.body, media_type=cached.media_type)

        response = await call_next(request)
        if response.status_code != 200:
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        media_type = response.headers.get("content-type", "application/json")
        cache.set(key, body, media_type)
        return Response(
            content=body,
            status_code=response.status_code,
            headers={k: v for k, v in response.headers.items() if k.lower() != "content-length"},
            media_type=media_type,
        )
