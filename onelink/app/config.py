"""
Configuration module for the OneLink API proxy.

This module uses Pydantic Settings to load and validate environment variables
for the upstream credentials, upstream endpoints, the outbound HTTP timeout,
and the local development server.

Environment variables are loaded from .env file or system environment.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SYSTEM_PROMPT = (
    "You are an AI assistant for OneLink. You help users optimize their "
    "link-in-bio profiles. Here is the current profile context: "
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Credentials are optional at load time: a missing credential is reported
    by the handler that needs it (serverless mode) or by the startup check
    (local server mode), never by settings validation.
    """

    # =========================================================================
    # Chat Upstream (OpenRouter)
    # =========================================================================

    OPENROUTER_API_KEY: Optional[str] = Field(
        None,
        description="OpenRouter API key used as a Bearer token",
    )

    OPENROUTER_API_URL: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        description="OpenRouter chat completions endpoint",
        min_length=1,
    )

    OPENROUTER_MODEL: str = Field(
        default="nvidia/nemotron-3-nano-30b-a3b:free",
        description="Model identifier sent with every chat completion",
        min_length=1,
    )

    OPENROUTER_SITE_URL: str = Field(
        default="https://onelink-demo.vercel.app",
        description="Sent as HTTP-Referer to identify the app to OpenRouter",
    )

    OPENROUTER_SITE_TITLE: str = Field(
        default="OneLink Demo",
        description="Sent as X-Title to identify the app to OpenRouter",
    )

    CHAT_SYSTEM_PROMPT: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="Persona prompt; the caller's profile context is appended to it",
    )

    # =========================================================================
    # Translation Upstream (DeepL)
    # =========================================================================

    DEEPL_API_KEY: Optional[str] = Field(
        None,
        description="DeepL authentication key",
    )

    DEEPL_API_URL: str = Field(
        default="https://api-free.deepl.com/v2",
        description="DeepL API base URL (translate and usage live below it)",
        min_length=1,
    )

    # =========================================================================
    # Outbound HTTP
    # =========================================================================

    UPSTREAM_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Timeout applied to every upstream call",
        ge=1.0,
        le=300.0,
    )

    # =========================================================================
    # Local Server Configuration
    # =========================================================================

    SERVER_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the local server",
    )

    SERVER_PORT: int = Field(
        default=8080,
        description="Port to bind the local server",
        ge=1,
        le=65535,
    )

    STARTUP_CONFIG_CHECK: Literal["fatal", "warn"] = Field(
        default="fatal",
        description="Whether missing credentials stop the local server or only warn",
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # =========================================================================
    # Pydantic Settings Configuration
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def deepl_translate_url(self) -> str:
        return f"{self.DEEPL_API_URL.rstrip('/')}/translate"

    @property
    def deepl_usage_url(self) -> str:
        return f"{self.DEEPL_API_URL.rstrip('/')}/usage"

    @property
    def missing_credentials(self) -> List[str]:
        """
        Names of credential variables that are unset or empty.

        Returns:
            List of environment variable names, in declaration order.
        """
        missing = []
        for key in ("OPENROUTER_API_KEY", "DEEPL_API_KEY"):
            if not getattr(self, key):
                missing.append(key)
        return missing

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("OPENROUTER_API_KEY", "DEEPL_API_KEY")
    @classmethod
    def blank_credential_is_absent(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate that LOG_LEVEL names a standard logging level.

        Raises:
            ValueError: If the level is unknown
        """
        level = v.strip().upper()
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

        if level not in allowed_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {allowed_levels}, got: {v}"
            )

        return level


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    Used by the long-running local server, which resolves configuration
    once at startup. Serverless functions build a fresh Settings per request
    instead.

    Returns:
        Settings instance with all configuration loaded and validated.
    """
    return Settings()


# =============================================================================
# Configuration Helpers
# =============================================================================

def validate_configuration(settings: Settings) -> Dict[str, Any]:
    """
    Validate critical configuration settings and return a status report.

    Called by the local server at startup. Missing credentials are errors;
    upstream URLs pointing at localhost are warnings.

    Example:
        >>> status = validate_configuration(get_settings())
        >>> if not status["valid"]:
        ...     print(status["errors"])
    """
    errors = []
    warnings = []

    for key in settings.missing_credentials:
        errors.append(f"{key} environment variable is not set")

    for name in ("OPENROUTER_API_URL", "DEEPL_API_URL"):
        url = getattr(settings, name)
        if "localhost" in url or "127.0.0.1" in url:
            warnings.append(f"{name} points to localhost ({url})")

    if not settings.OPENROUTER_API_URL.startswith("https://"):
        warnings.append("OPENROUTER_API_URL is not using HTTPS")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "timeout_seconds": settings.UPSTREAM_TIMEOUT_SECONDS,
    }


def log_configuration_report(report: Dict[str, Any], logger: logging.Logger) -> None:
    for error in report["errors"]:
        logger.error(f"Configuration error: {error}")
    for warning in report["warnings"]:
        logger.warning(f"Configuration warning: {warning}")


class ConfigurationError(RuntimeError):
    """Raised at local server startup when required configuration is missing"""


def check_startup_configuration(settings: Settings, logger: logging.Logger) -> Dict[str, Any]:
    """
    Run the local server's startup check.

    In ``fatal`` mode a missing credential raises ConfigurationError; in
    ``warn`` mode it is only logged and the affected endpoints answer 500
    until the credential is provided.

    Raises:
        ConfigurationError: Configuration is invalid and STARTUP_CONFIG_CHECK is fatal
    """
    report = validate_configuration(settings)
    log_configuration_report(report, logger)

    if not report["valid"]:
        if settings.STARTUP_CONFIG_CHECK == "fatal":
            raise ConfigurationError("; ".join(report["errors"]))
        logger.warning("Starting with incomplete configuration; affected endpoints will return 500")
    else:
        logger.info("All upstream credentials are configured")

    return report
