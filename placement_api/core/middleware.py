"""
placement_api/core/middleware.py

Purpose: Response hardening headers

Usage:
    app.add_middleware(SecurityHeadersMiddleware, environment=settings.ENVIRONMENT)
"""

from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; "
        "base-uri 'self'; "
        "font-src 'self' https: data:; "
        "form-action 'self'; "
        "frame-ancestors 'self'; "
        "img-src 'self' data:; "
        "object-src 'none'; "
        "script-src 'self'; "
        "style-src 'self' https: 'unsafe-inline'; "
        "upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-site",
    "Referrer-Policy": "no-referrer",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}

HSTS_VALUE = "max-age=15552000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds browser hardening headers to every response.

    HSTS is only sent in production, where the API sits behind HTTPS.
    """

    def __init__(self, app, environment: str = "development"):
        super().__init__(app)
        self.enable_hsts = environment == "production"

    async def dispatch(self, request: Request, call_next: Callable):
        response = await call_next(request)

        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)

        if self.enable_hsts:
            response.headers["Strict-Transport-Security"] = HSTS_VALUE

        return response
