"""
Proxy Routes
============

Maps each ``/api/<name>`` path to a proxy handler. Routes accept every
common verb so the handler, not the framework, answers wrong-verb requests
with a JSON error and CORS headers.

Endpoints:
----------
- /api/chat: POST, OpenRouter chat completion
- /api/translate: POST, DeepL translation
- /api/usage: GET, DeepL character quota
"""

from typing import Dict, Optional, Type

import httpx
from fastapi import APIRouter

from ..config import Settings
from .chat import ChatHandler
from .handler import ProxyHandler
from .translate import TranslateHandler
from .usage import UsageHandler


PROXY_HANDLERS: Dict[str, Type[ProxyHandler]] = {
    ChatHandler.name: ChatHandler,
    TranslateHandler.name: TranslateHandler,
    UsageHandler.name: UsageHandler,
}

ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"]


def get_handler_class(name: str) -> Type[ProxyHandler]:
    try:
        return PROXY_HANDLERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown proxy handler '{name}', expected one of {sorted(PROXY_HANDLERS)}"
        ) from None


def build_proxy_router(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> APIRouter:
    """
    Build a router with one handler instance per endpoint.

    Args:
        settings: Configuration injected into every handler
        transport: Optional httpx transport shared by the handlers

    Returns:
        APIRouter with the /api/* proxy routes
    """
    router = APIRouter(tags=["Proxy"])

    for name, handler_class in PROXY_HANDLERS.items():
        handler = handler_class(settings, transport=transport)
        router.add_api_route(
            f"/api/{name}",
            handler.dispatch,
            methods=ROUTE_METHODS,
            name=f"proxy_{name}",
            response_model=None,
        )

    return router
