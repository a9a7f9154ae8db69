"""
Usage proxy: reports the DeepL character quota.

Unlike the other endpoints, a non-2xx answer from DeepL is not an error
here. It is reported as an unknown quota, i.e. ``{"character_count": 0,
"character_limit": 0}`` with status 200. Transport failures and
unparseable 2xx bodies still fail normally.
"""

import logging

import httpx

from ..models import DeepLUsage, UpstreamCall, UsageResponse
from .handler import ProxyHandler

logger = logging.getLogger(__name__)


class UsageHandler(ProxyHandler):
    name = "usage"
    upstream = "DeepL"
    method = "GET"
    credential_setting = "DEEPL_API_KEY"

    def build_call(self, payload: None, credential: str) -> UpstreamCall:
        return UpstreamCall(
            method="GET",
            url=self.settings.deepl_usage_url,
            headers={"Authorization": f"DeepL-Auth-Key {credential}"},
        )

    def on_upstream_error(self, response: httpx.Response) -> UsageResponse:
        # NOTE: degrades to an unknown (zero) quota instead of failing; kept
        # as-is pending a product decision on surfacing quota errors.
        logger.warning(
            f"DeepL usage query failed with {response.status_code}, reporting zero usage",
            extra={"endpoint": self.name, "status_code": response.status_code}
        )
        return UsageResponse()

    def to_response(self, response: httpx.Response) -> UsageResponse:
        usage = self.parse_upstream(response, DeepLUsage)
        return UsageResponse(
            character_count=usage.character_count,
            character_limit=usage.character_limit,
        )
