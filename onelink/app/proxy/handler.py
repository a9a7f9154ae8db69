"""
Proxy Handler - Generic Upstream Forwarding
===========================================

A ``ProxyHandler`` turns one inbound browser request into exactly one
outbound call to a named upstream API and relays the result.

Request Flow:
-------------
1. OPTIONS preflight short-circuits with 200 and the CORS headers
2. Method must match the endpoint's declared verb (405 otherwise)
3. JSON body is decoded and required fields are checked (400 otherwise)
4. Upstream credential is resolved from the injected settings (500 otherwise)
5. The outbound call is built and executed once, with no retry
6. Transport failures, non-2xx statuses, unparseable bodies and empty
   results each map to their own error class
7. The primary result is mapped into the normalized response shape

Subclasses declare the endpoint (``method``, ``request_model``,
``required_fields``, ``credential_setting``) and implement ``build_call``
and ``to_response``.
"""

import json
import logging
from typing import Dict, Optional, Tuple, Type, TypeVar

import httpx
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from ..config import Settings
from ..errors import (
    BadRequest,
    InternalError,
    MethodNotAllowed,
    ProxyError,
    ResponseParseError,
    UpstreamError,
    UpstreamUnreachable,
)
from ..models import UpstreamCall

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class ProxyHandler:
    """
    Stateless proxy boundary over a single upstream endpoint.

    Attributes:
        name: Short endpoint name used in routes and logs
        upstream: Display name of the upstream service used in error messages
        method: The one HTTP verb the endpoint accepts besides OPTIONS
        request_model: Pydantic model for the inbound body (None for bodiless GETs)
        required_fields: Body fields that must be present and non-empty
        credential_setting: Name of the Settings field holding the upstream key
    """

    name: str = ""
    upstream: str = ""
    method: str = "POST"
    request_model: Optional[Type[BaseModel]] = None
    required_fields: Tuple[str, ...] = ()
    credential_setting: str = ""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            settings: Configuration the handler reads credentials and URLs from
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.settings = settings
        self._transport = transport

    @property
    def cors_headers(self) -> Dict[str, str]:
        return {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": f"{self.method}, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
        }

    # ========================================================================
    # Entry Point
    # ========================================================================

    async def dispatch(self, request: Request) -> Response:
        """
        Handle one inbound request and always return a response.

        Every response, including errors and preflights, carries the CORS
        headers. Non-preflight responses are JSON.
        """
        headers = self.cors_headers

        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_200_OK, headers=headers)

        try:
            if request.method != self.method:
                raise MethodNotAllowed()
            payload = await self.read_payload(request)
            result = await self.handle(payload)
        except ProxyError as exc:
            self._log_failure(exc)
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_dict(),
                headers=headers,
            )

        return JSONResponse(
            content=result.model_dump(exclude_none=True),
            headers=headers,
        )

    async def handle(self, payload: Optional[BaseModel]) -> BaseModel:
        """
        Forward a validated payload upstream and return the normalized result.

        Raises:
            ProxyError: Any of the taxonomy classes on failure
        """
        credential = self.resolve_credential()
        call = self.build_call(payload, credential)

        logger.info(
            f"Proxying {self.name} request to {self.upstream}",
            extra={
                "endpoint": self.name,
                "upstream": self.upstream,
                "upstream_method": call.method,
            }
        )

        response = await self.execute(call)

        if not response.is_success:
            return self.on_upstream_error(response)

        return self.to_response(response)

    # ========================================================================
    # Inbound Validation
    # ========================================================================

    async def read_payload(self, request: Request) -> Optional[BaseModel]:
        if self.request_model is None:
            return None

        raw = await request.body()
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise BadRequest(f"Invalid request body: {e}") from e

        if not isinstance(data, dict):
            raise BadRequest("Invalid request body: expected a JSON object")

        for field in self.required_fields:
            value = data.get(field)
            if value is None or value == "":
                raise BadRequest(f"{field} is required")

        try:
            return self.request_model.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise BadRequest(f"Invalid request body: {location}: {first['msg']}") from e

    def resolve_credential(self) -> str:
        credential = getattr(self.settings, self.credential_setting, None)
        if not credential:
            logger.error(
                f"{self.credential_setting} is not configured",
                extra={"endpoint": self.name}
            )
            raise InternalError(
                f"{self.credential_setting} environment variable is not configured"
            )
        return credential

    # ========================================================================
    # Outbound Call
    # ========================================================================

    def build_call(self, payload: Optional[BaseModel], credential: str) -> UpstreamCall:
        raise NotImplementedError

    async def execute(self, call: UpstreamCall) -> httpx.Response:
        """
        Execute the call exactly once and return the fully read response.

        The client is scoped to this call, so the connection is released on
        every exit path.

        Raises:
            InternalError: The request could not be constructed or serialized
            UpstreamUnreachable: Connection, DNS, timeout or read failure
        """
        timeout = httpx.Timeout(self.settings.UPSTREAM_TIMEOUT_SECONDS)

        async with httpx.AsyncClient(transport=self._transport, timeout=timeout) as client:
            try:
                outbound = client.build_request(
                    call.method,
                    call.url,
                    headers=call.headers,
                    json=call.json_body,
                    data=call.form_body,
                )
            except (httpx.InvalidURL, TypeError, ValueError) as e:
                raise InternalError(f"Failed to create request: {e}") from e

            try:
                return await client.send(outbound)
            except httpx.RequestError as e:
                detail = str(e) or type(e).__name__
                raise UpstreamUnreachable(
                    f"Failed to connect to {self.upstream}: {detail}"
                ) from e

    # ========================================================================
    # Upstream Response Mapping
    # ========================================================================

    def on_upstream_error(self, response: httpx.Response) -> BaseModel:
        raise UpstreamError(
            self.upstream,
            response.status_code,
            response.reason_phrase,
            response.text,
        )

    def parse_upstream(self, response: httpx.Response, model: Type[M]) -> M:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise ResponseParseError(self.upstream, response.text) from e

    def to_response(self, response: httpx.Response) -> BaseModel:
        raise NotImplementedError

    def _log_failure(self, exc: ProxyError) -> None:
        extra = {
            "endpoint": self.name,
            "status_code": exc.status_code,
            "error_type": type(exc).__name__,
        }
        if exc.status_code >= 500:
            logger.error(f"{self.name} request failed: {exc.message}", extra=extra)
        else:
            logger.warning(f"{self.name} request rejected: {exc.message}", extra=extra)
