"""
Proxy Package
=============

This package implements the stateless proxy endpoints that forward browser
requests to third-party APIs and normalize their answers.

Main Components:
----------------
- handler.py: ProxyHandler, the shared validate/forward/map contract
- chat.py: OpenRouter chat completion proxy
- translate.py: DeepL translation proxy
- usage.py: DeepL usage query (degrades to zero usage on upstream errors)
- routes.py: router mapping /api/<name> paths to handlers

Usage:
------
    from onelink.app.proxy import build_proxy_router
    app.include_router(build_proxy_router(settings))
"""

from .chat import ChatHandler
from .handler import ProxyHandler
from .routes import PROXY_HANDLERS, build_proxy_router, get_handler_class
from .translate import TranslateHandler
from .usage import UsageHandler

__all__ = [
    "ChatHandler",
    "PROXY_HANDLERS",
    "ProxyHandler",
    "TranslateHandler",
    "UsageHandler",
    "build_proxy_router",
    "get_handler_class",
]
