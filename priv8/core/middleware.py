"""
HTTP middleware for priv8
Handles security headers and request audit logging
"""
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from priv8.core.logger import get_logger


# Security headers configuration
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    # JSON only; nothing here should ever be rendered or framed
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none';",
    # Revealed secrets must not linger in browser or proxy caches
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log requests for audit purposes. Bodies are never logged."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        logger = get_logger("requests")

        client_ip = request.client.host if request.client else "unknown"
        logger.info(f"{request.method} {request.url.path} - IP: {client_ip}")

        response = await call_next(request)

        logger.info(f"{request.method} {request.url.path} - Status: {response.status_code}")

        return response
