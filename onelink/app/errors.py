"""
Proxy Error Taxonomy
====================

Every failure a proxy handler can report is one of the classes below. Each
carries the HTTP status it maps to and a human-readable message that becomes
the ``error`` field of the JSON response body.

All errors are terminal for the request: nothing is retried and no partial
result is returned.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class ProxyError(Exception):
    """Base exception for proxy handler failures"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class MethodNotAllowed(ProxyError):
    """Request used a verb the endpoint does not declare"""

    status_code = status.HTTP_405_METHOD_NOT_ALLOWED
    default_message = "Method not allowed"


class BadRequest(ProxyError):
    """Malformed body or missing required field"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class InternalError(ProxyError):
    """Missing configuration or failure building the outbound call"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UpstreamUnreachable(ProxyError):
    """Transport-level failure (connect, DNS, timeout) reaching the upstream"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Upstream service unreachable"


class UpstreamError(ProxyError):
    """
    Upstream answered with a non-2xx status.

    Attributes:
        upstream_status: Status code returned by the upstream
        body: Raw upstream response body
    """

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, upstream: str, upstream_status: int, reason: str, body: str):
        self.upstream_status = upstream_status
        self.body = body
        status_text = f"{upstream_status} {reason}".strip()
        super().__init__(f"{upstream} API error ({status_text}): {body}")


class ResponseParseError(ProxyError):
    """Upstream body did not match the expected schema"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, upstream: str, body: str):
        self.body = body
        super().__init__(f"Failed to parse {upstream} response: {body}")


class EmptyResult(ProxyError):
    """Upstream succeeded but returned nothing usable"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, upstream: str, what: str = "results"):
        super().__init__(f"{upstream} returned no {what}")


def install_exception_handlers(app: FastAPI) -> None:
    """
    Register handlers for errors raised outside a proxy handler.

    Framework errors (unknown path, unroutable verb) and unexpected
    exceptions are rendered in the same {"error": ...} shape, with CORS
    headers. ProxyError never reaches here; handlers render it themselves.
    """

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        headers = dict(exc.headers or {})
        headers.update(CORS_HEADERS)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled exception: {exc}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__
            },
            exc_info=True
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "An unexpected error occurred"},
            headers=CORS_HEADERS,
        )
