"""Signing proxy dispatcher for the TikTok Shop Open API.

Accepts a logical request, signs it, sends it to the right upstream host and
relays the result as ``Ok`` / ``Err``. Every call is parameterized only by its
explicit inputs; the dispatcher keeps no per-request state between calls.
"""

import time
from typing import Any, Callable, Dict, Optional

import httpx

from tiktok_proxy.api.endpoints import is_auth_endpoint, resolve_base_url
from tiktok_proxy.config.constants import (
    ACCESS_TOKEN_HEADER,
    APP_SECRET_PARAM,
    RESULT_CODE_OK,
    SIGN_EXCLUDED_PARAMS,
    SIGN_PARAM,
    TIMESTAMP_PARAM,
)
from tiktok_proxy.config.settings import Settings
from tiktok_proxy.core.errors import ConfigurationError, ErrorKind
from tiktok_proxy.core.logger import setup_logger
from tiktok_proxy.core.signature import is_scalar, serialize_body, sign_request
from tiktok_proxy.models.proxy import Err, Ok, ProxyRequest, Result, SignedRequest, UpstreamResponse

logger = setup_logger(__name__)

Clock = Callable[[], float]


class Dispatcher:
    """Async dispatcher holding one pooled HTTP client and static host config."""

    def __init__(
        self,
        api_host: str,
        auth_host: str,
        clock_skew_seconds: int = 0,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        clock: Clock = time.time,
    ):
        """
        Initialize dispatcher.

        Args:
            api_host: Commerce API base URL
            auth_host: Token API base URL
            clock_skew_seconds: Seconds subtracted from the local clock before
                the timestamp is injected
            timeout: Upstream request timeout in seconds
            client: Optional pre-built AsyncClient (tests inject a mock transport)
            clock: Time source returning Unix seconds
        """
        if not api_host or not auth_host:
            raise ConfigurationError("Both api_host and auth_host must be configured")

        self.api_host = api_host
        self.auth_host = auth_host
        self.clock_skew_seconds = clock_skew_seconds
        self.clock = clock
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "Dispatcher":
        return cls(
            api_host=settings.api_host,
            auth_host=settings.auth_host,
            clock_skew_seconds=settings.clock_skew_seconds,
            timeout=settings.request_timeout,
            client=client,
        )

    def current_timestamp(self) -> int:
        """Local Unix time minus the configured clock skew."""
        return int(self.clock()) - self.clock_skew_seconds

    def build_request(self, request: ProxyRequest) -> SignedRequest:
        """
        Assemble the outbound call for a logical request.

        Token endpoints authenticate with the app secret as a query parameter.
        All other endpoints get a timestamp, an HMAC ``sign`` parameter and the
        access token header.

        Raises:
            ConfigurationError: Missing secret or malformed endpoint
        """
        endpoint = request.endpoint
        if not endpoint or not endpoint.startswith("/"):
            raise ConfigurationError("Endpoint must be an upstream path starting with '/'")
        if not request.app_secret:
            raise ConfigurationError("App secret is required", {"endpoint": endpoint})

        url = f"{resolve_base_url(endpoint, self.api_host, self.auth_host)}{endpoint}"
        headers = {"Content-Type": "application/json"}

        params = self._query_params(request.params)
        body = request.body
        if body and request.method == "GET":
            logger.warning(f"Ignoring body on GET request to {endpoint}")
            body = None
        content = serialize_body(body)

        if is_auth_endpoint(endpoint):
            params[APP_SECRET_PARAM] = request.app_secret
            return SignedRequest(
                method=request.method,
                url=url,
                path=endpoint,
                params=params,
                headers=headers,
                content=content,
            )

        timestamp = self.current_timestamp()
        params[TIMESTAMP_PARAM] = timestamp
        signature = sign_request(request.app_secret, endpoint, params, body)
        params[SIGN_PARAM] = signature

        if request.access_token:
            headers[ACCESS_TOKEN_HEADER] = request.access_token

        return SignedRequest(
            method=request.method,
            url=url,
            path=endpoint,
            params=params,
            headers=headers,
            content=content,
            signature=signature,
            timestamp=timestamp,
        )

    @staticmethod
    def _query_params(raw_params: Dict[str, Any]) -> Dict[str, Any]:
        """Scalar caller parameters, without any caller-supplied sign or token."""
        params = {}
        for key, value in raw_params.items():
            if key in SIGN_EXCLUDED_PARAMS or value is None:
                continue
            if not is_scalar(value):
                logger.warning(f"Dropping non-scalar query parameter '{key}'")
                continue
            params[key] = value
        return params

    async def send(self, signed: SignedRequest) -> UpstreamResponse:
        """
        Issue the HTTP call and parse the marketplace envelope.

        Raises:
            httpx.HTTPError: Transport failures
            ValueError: 2xx body is not valid JSON
        """
        logger.info(f"Proxying {signed.method} {signed.path}", extra={"endpoint": signed.path})

        response = await self.client.request(
            signed.method,
            signed.url,
            params=signed.params,
            headers=signed.headers,
            content=signed.content.encode("utf-8") if signed.content is not None else None,
        )
        try:
            payload = response.json()
        except ValueError:
            if response.is_success:
                raise
            # Error pages (gateway HTML, plain text) are relayed with their status
            payload = response.text or None

        upstream = UpstreamResponse(status_code=response.status_code, payload=payload)
        if isinstance(payload, dict):
            code = payload.get("code")
            upstream.code = code if isinstance(code, int) else None
            upstream.message = str(payload.get("message") or "")
            upstream.data = payload.get("data")
            upstream.request_id = payload.get("request_id")
        return upstream

    async def dispatch(self, request: ProxyRequest) -> Result:
        """
        Sign, send and classify one request.

        Returns:
            ``Ok`` on HTTP 2xx with result code 0, otherwise ``Err`` labeled
            transport, upstream_http, invalid_response or business

        Raises:
            ConfigurationError: Raised before any network I/O
        """
        signed = self.build_request(request)

        try:
            upstream = await self.send(signed)
        except httpx.HTTPError as e:
            logger.error(f"Transport error calling {signed.path}: {type(e).__name__}: {e}")
            return Err(ErrorKind.TRANSPORT, f"Upstream request failed: {type(e).__name__}")
        except ValueError:
            logger.error(f"Upstream returned non-JSON body for {signed.path}")
            return Err(ErrorKind.INVALID_RESPONSE, "Upstream returned a non-JSON response")

        if not upstream.http_ok:
            logger.warning(f"Upstream HTTP {upstream.status_code} for {signed.path}")
            return Err(
                ErrorKind.UPSTREAM_HTTP,
                upstream.message or f"Upstream HTTP {upstream.status_code}",
                status=upstream.status_code,
                code=upstream.code,
                payload=upstream.payload,
            )

        if not isinstance(upstream.payload, dict) or upstream.code is None:
            logger.error(f"Upstream response for {signed.path} has no result code")
            return Err(
                ErrorKind.INVALID_RESPONSE,
                "Upstream response has no result code",
                status=upstream.status_code,
                payload=upstream.payload,
            )

        if upstream.code != RESULT_CODE_OK:
            logger.warning(
                f"Business error from {signed.path}: code={upstream.code} "
                f"message={upstream.message} request_id={upstream.request_id}"
            )
            return Err(
                ErrorKind.BUSINESS,
                upstream.message or "API request failed",
                status=upstream.status_code,
                code=upstream.code,
                payload=upstream.payload,
            )

        return Ok(data=upstream.data, response=upstream)

    async def aclose(self) -> None:
        """Close HTTP client connection."""
        await self.client.aclose()
