"""
Translate proxy: forwards text to DeepL as a URL-encoded form and returns
the first translation with the language DeepL detected.
"""

import httpx

from ..errors import EmptyResult
from ..models import DeepLTranslateResult, TranslateRequest, TranslateResponse, UpstreamCall
from .handler import ProxyHandler


class TranslateHandler(ProxyHandler):
    name = "translate"
    upstream = "DeepL"
    method = "POST"
    request_model = TranslateRequest
    required_fields = ("text", "target_lang")
    credential_setting = "DEEPL_API_KEY"

    def build_call(self, payload: TranslateRequest, credential: str) -> UpstreamCall:
        form = {
            "text": payload.text,
            "target_lang": payload.target_lang.strip().upper(),
        }
        # DeepL auto-detects when source_lang is omitted
        if not payload.auto_detect:
            form["source_lang"] = payload.source_lang.strip().upper()

        return UpstreamCall(
            method="POST",
            url=self.settings.deepl_translate_url,
            headers={"Authorization": f"DeepL-Auth-Key {credential}"},
            form_body=form,
        )

    def to_response(self, response: httpx.Response) -> TranslateResponse:
        result = self.parse_upstream(response, DeepLTranslateResult)
        if not result.translations:
            raise EmptyResult(self.upstream, "translations")

        first = result.translations[0]
        return TranslateResponse(
            translated_text=first.text,
            detected_language=first.detected_source_language or None,
        )
