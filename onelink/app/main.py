"""
FastAPI Application Factory (Local Server)
==========================================

This is the entry point for the long-running proxy service used in local
development and self-hosted deployments.

Architecture:
    Browser → OneLink API (this service) → OpenRouter / DeepL

Routes:
    - /api/chat       : Chat completion proxy (POST)
    - /api/translate  : Translation proxy (POST)
    - /api/usage      : Translation quota query (GET)
    - /health         : Health check endpoint

Environment Variables:
    - OPENROUTER_API_KEY: OpenRouter credential for /api/chat
    - DEEPL_API_KEY: DeepL credential for /api/translate and /api/usage
    - STARTUP_CONFIG_CHECK: "fatal" (default) or "warn" when a credential is missing
    - UPSTREAM_TIMEOUT_SECONDS: Outbound call timeout (default: 30)
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        onelink-api
        python -m onelink.app.main

    With uvicorn directly:
        uvicorn onelink.app.main:app --reload --host 0.0.0.0 --port 8080
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Dict, Optional

import httpx
import uvicorn
from fastapi import FastAPI

from .config import ConfigurationError, Settings, check_startup_configuration, get_settings
from .errors import install_exception_handlers
from .proxy import PROXY_HANDLERS, build_proxy_router

SERVICE_NAME = "onelink-api"
SERVICE_VERSION = "1.0.0"


# Configure structured JSON logging
def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup runs the configuration check against the settings the handlers
    were built with, unless run() already did. In fatal mode a missing
    credential aborts startup.
    """
    settings: Settings = app.state.settings
    logger = logging.getLogger("onelink.main")

    logger.info(
        "Starting proxy service",
        extra={
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "log_level": settings.LOG_LEVEL,
        }
    )

    if getattr(app.state, "config_report", None) is None:
        app.state.config_report = check_startup_configuration(settings, logger)

    yield

    logger.info("Proxy service shutdown complete")


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Application factory function.

    Args:
        settings: Configuration injected into every handler (defaults to
            the cached environment settings)
        transport: Optional httpx transport for the upstream calls

    Returns:
        FastAPI: Configured application instance
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="OneLink API",
        description="CORS-enabled proxy for the OneLink chat and translation features",
        version=SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.settings = settings

    app.include_router(build_proxy_router(settings, transport=transport))

    @app.get("/health", tags=["System"])
    async def health_check() -> Dict[str, str]:
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION
        }

    @app.get("/", tags=["System"])
    async def root() -> Dict[str, object]:
        """
        Root endpoint with service information.

        Returns:
            dict: Service metadata and available endpoints
        """
        endpoints = {name: f"/api/{name}" for name in PROXY_HANDLERS}
        endpoints["health"] = "/health"
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "endpoints": endpoints,
        }

    install_exception_handlers(app)

    return app


def run() -> None:
    """
    Console entry point: check configuration, then serve with uvicorn.

    Exits with status 1 when a credential is missing and
    STARTUP_CONFIG_CHECK is fatal.
    """
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    logger = logging.getLogger("onelink.main")

    try:
        report = check_startup_configuration(settings, logger)
    except ConfigurationError as e:
        logger.critical(f"Refusing to start: {e}")
        sys.exit(1)

    for name in PROXY_HANDLERS:
        logger.info(f"{name} endpoint available at http://localhost:{settings.SERVER_PORT}/api/{name}")

    application = create_app(settings)
    application.state.config_report = report

    uvicorn.run(
        application,
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


# Create app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    run()
