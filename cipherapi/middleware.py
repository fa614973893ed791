"""
Cross-cutting HTTP middleware: security headers and request logging.
"""

import logging

from fastapi import Request

logger = logging.getLogger(__name__)

SECURE_HEADERS = {
    "Content-Security-Policy": "default-src 'self';",
    "Referrer-Policy": "origin-when-cross-origin",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "deny",
    "X-XSS-Protection": "0",
}


async def secure_headers(request: Request, call_next):
    """Add the minimum security headers to every response."""
    response = await call_next(request)
    for name, value in SECURE_HEADERS.items():
        response.headers[name] = value
    return response


async def log_request(request: Request, call_next):
    """Log the route being requested before it is dispatched."""
    uri = request.url.path
    if request.url.query:
        uri = f"{uri}?{request.url.query}"
    logger.info("Request made to %s route.", uri)
    return await call_next(request)
