"""
Chat proxy: forwards a user message plus profile context to OpenRouter's
chat completions API and returns the first completion as ``{"reply": ...}``.
"""

from typing import Dict, List

import httpx

from ..errors import EmptyResult
from ..models import ChatRequest, ChatResponse, OpenRouterChatCompletion, UpstreamCall
from .handler import ProxyHandler


class ChatHandler(ProxyHandler):
    name = "chat"
    upstream = "OpenRouter"
    method = "POST"
    request_model = ChatRequest
    required_fields = ("message", "profile")
    credential_setting = "OPENROUTER_API_KEY"

    def build_messages(self, payload: ChatRequest) -> List[Dict[str, str]]:
        """System persona with the profile context, then the user message verbatim."""
        return [
            {
                "role": "system",
                "content": self.settings.CHAT_SYSTEM_PROMPT + payload.profile,
            },
            {
                "role": "user",
                "content": payload.message,
            },
        ]

    def build_call(self, payload: ChatRequest, credential: str) -> UpstreamCall:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        }
        # OpenRouter attribution headers
        if self.settings.OPENROUTER_SITE_URL:
            headers["HTTP-Referer"] = self.settings.OPENROUTER_SITE_URL
        if self.settings.OPENROUTER_SITE_TITLE:
            headers["X-Title"] = self.settings.OPENROUTER_SITE_TITLE

        return UpstreamCall(
            method="POST",
            url=self.settings.OPENROUTER_API_URL,
            headers=headers,
            json_body={
                "model": self.settings.OPENROUTER_MODEL,
                "messages": self.build_messages(payload),
            },
        )

    def to_response(self, response: httpx.Response) -> ChatResponse:
        completion = self.parse_upstream(response, OpenRouterChatCompletion)
        if not completion.choices:
            raise EmptyResult(self.upstream, "choices")
        return ChatResponse(reply=completion.choices[0].message.content or "")
