"""
Data Models Module

This module defines Pydantic models for request/response validation
and data serialization throughout the proxy service.

Models are organized by functional area:
- Inbound request models (what browser clients send)
- Normalized response models (what the proxy returns)
- Upstream wire models (what OpenRouter and DeepL send back)
- The outbound call description built fresh for every request
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Inbound Request Models
# ============================================================================

class ChatRequest(BaseModel):
    """Chat message plus the profile context the assistant should see."""
    message: str = Field(..., description="User message, forwarded verbatim")
    profile: str = Field(..., description="Current profile context appended to the system prompt")


class TranslateRequest(BaseModel):
    """Translation request from the frontend."""
    text: str = Field(..., description="Text to translate")
    target_lang: str = Field(..., description="Target language code (e.g. 'de', 'EN-US')")
    source_lang: Optional[str] = Field(
        None,
        description="Source language code; absent, empty or 'auto' means auto-detect",
    )

    @property
    def auto_detect(self) -> bool:
        return not self.source_lang or self.source_lang.strip().lower() == "auto"


# ============================================================================
# Normalized Response Models
# ============================================================================

class ChatResponse(BaseModel):
    reply: str


class TranslateResponse(BaseModel):
    translated_text: str
    detected_language: Optional[str] = Field(
        None, description="Omitted when the upstream did not report a language"
    )


class UsageResponse(BaseModel):
    """Character quota; both fields are zero when the quota is unknown."""
    character_count: int = 0
    character_limit: int = 0


class ErrorResponse(BaseModel):
    """Standardized error response model."""
    error: str = Field(..., description="Human-readable error message")


# ============================================================================
# Upstream Wire Models
# ============================================================================
# Missing keys decode to empty defaults; only a body that is not a JSON
# object of the right shape is a parse error.

class OpenRouterMessage(BaseModel):
    content: Optional[str] = None


class OpenRouterChoice(BaseModel):
    message: OpenRouterMessage = Field(default_factory=OpenRouterMessage)


class OpenRouterChatCompletion(BaseModel):
    choices: List[OpenRouterChoice] = Field(default_factory=list)


class DeepLTranslation(BaseModel):
    text: str = ""
    detected_source_language: str = ""


class DeepLTranslateResult(BaseModel):
    translations: List[DeepLTranslation] = Field(default_factory=list)


class DeepLUsage(BaseModel):
    character_count: int = 0
    character_limit: int = 0


# ============================================================================
# Outbound Call
# ============================================================================

class UpstreamCall(BaseModel):
    """
    One outbound HTTP call, built per request and never persisted.

    Exactly one of ``json_body`` / ``form_body`` is set for calls that carry
    a body; read-only calls carry neither.
    """
    model_config = ConfigDict(frozen=True)

    method: Literal["GET", "POST"]
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    json_body: Optional[Dict[str, Any]] = None
    form_body: Optional[Dict[str, str]] = None
