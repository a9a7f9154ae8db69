"""
Serverless Function Apps
========================

Each serverless function serves exactly one proxy handler. Unlike the local
server, nothing is checked at startup: settings are resolved from the
environment on every request and the handler is constructed per request,
so a missing credential surfaces as a 500 response for that request.

Usage (api/translate.py):
    from onelink.app.serverless import create_function_app
    app = create_function_app("translate")
"""

from typing import Callable, Optional

import httpx
from fastapi import FastAPI, Request, Response

from .config import Settings
from .errors import install_exception_handlers
from .proxy import get_handler_class
from .proxy.routes import ROUTE_METHODS


def create_function_app(
    name: str,
    settings_factory: Callable[[], Settings] = Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build a single-handler ASGI app for a serverless function.

    The app answers on every path, since the platform routes by file.

    Args:
        name: Handler name ("chat", "translate" or "usage")
        settings_factory: Called per request to resolve configuration
        transport: Optional httpx transport for the upstream call

    Raises:
        ValueError: If the handler name is unknown
    """
    handler_class = get_handler_class(name)

    app = FastAPI(
        title=f"OneLink {name} function",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    async def handle_request(request: Request) -> Response:
        handler = handler_class(settings_factory(), transport=transport)
        return await handler.dispatch(request)

    app.add_api_route(
        "/{path:path}",
        handle_request,
        methods=ROUTE_METHODS,
        name=f"function_{name}",
        response_model=None,
    )

    install_exception_handlers(app)

    return app
