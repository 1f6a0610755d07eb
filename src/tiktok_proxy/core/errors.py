"""Error taxonomy for the signing proxy.

Every failure that leaves the dispatcher is labeled with an ``ErrorKind`` so
callers can tell a transport problem from a marketplace business rejection.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Labels for failures surfaced to SDK callers."""

    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    UPSTREAM_HTTP = "upstream_http"
    BUSINESS = "business"
    INVALID_RESPONSE = "invalid_response"


@dataclass(eq=False)
class TikTokProxyError(Exception):
    """Base exception raised by the proxy and SDK."""

    message: str
    kind: ErrorKind
    details: Dict[str, Any] = field(default_factory=dict)
    status: Optional[int] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        """Transport failures and upstream 5xx are worth retrying by the caller."""
        if self.kind == ErrorKind.TRANSPORT:
            return True
        return self.kind == ErrorKind.UPSTREAM_HTTP and (self.status or 0) >= 500


class ConfigurationError(TikTokProxyError):
    """Missing secret, app key or endpoint before a call is attempted."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorKind.CONFIGURATION, details or {})


class TransportError(TikTokProxyError):
    """DNS, connection or timeout failure talking to the upstream API."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorKind.TRANSPORT, details or {})


class InvalidResponseError(TikTokProxyError):
    """Upstream answered with a body that is not a JSON object."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, ErrorKind.INVALID_RESPONSE, details or {}, status)


class UpstreamHTTPError(TikTokProxyError):
    """Non-2xx HTTP status from the upstream API."""

    def __init__(
        self,
        message: str,
        status: int,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, ErrorKind.UPSTREAM_HTTP, details or {}, status)


class BusinessError(TikTokProxyError):
    """HTTP 200 with a non-zero marketplace result code."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if code is not None:
            merged.setdefault("code", code)
        super().__init__(message, ErrorKind.BUSINESS, merged, 200)

    @property
    def code(self) -> Optional[int]:
        return self.details.get("code")
