"""Request and result types exchanged with the dispatcher."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator

from tiktok_proxy.core.errors import (
    BusinessError,
    ConfigurationError,
    ErrorKind,
    InvalidResponseError,
    TikTokProxyError,
    TransportError,
    UpstreamHTTPError,
)

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE")


class ProxyRequest(BaseModel):
    """Logical request accepted by the dispatcher (camelCase keys accepted)."""

    method: str = "GET"
    endpoint: str = Field(..., description="Upstream path, e.g. /order/202309/orders/search")
    params: Dict[str, Any] = Field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None
    app_secret: str = Field(..., alias="appSecret", repr=False)
    access_token: Optional[str] = Field(None, alias="accessToken", repr=False)

    class Config:
        populate_by_name = True

    @field_validator("method")
    @classmethod
    def normalize_method(cls, value: str) -> str:
        method = value.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported method {value}")
        return method

    @field_validator("params", mode="before")
    @classmethod
    def default_params(cls, value: Any) -> Any:
        return value or {}


@dataclass
class SignedRequest:
    """Fully assembled outbound call, discarded once the call returns."""

    method: str
    url: str
    path: str
    params: Dict[str, Any]
    headers: Dict[str, str] = field(repr=False)
    content: Optional[str] = None
    signature: Optional[str] = None
    timestamp: Optional[int] = None


@dataclass
class UpstreamResponse:
    """Upstream HTTP status plus the marketplace envelope fields."""

    status_code: int
    payload: Any
    code: Optional[int] = None
    message: str = ""
    data: Any = None
    request_id: Optional[str] = None

    @property
    def http_ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class Ok:
    """Successful call: HTTP 2xx and result code 0."""

    data: Any
    response: UpstreamResponse

    ok = True

    def unwrap(self) -> Any:
        return self.data

    def raise_for_error(self) -> None:
        """Nothing to raise for a successful call."""


@dataclass(frozen=True)
class Err:
    """Failed call, labeled by kind."""

    kind: ErrorKind
    message: str
    status: Optional[int] = None
    code: Optional[int] = None
    payload: Any = None

    ok = False

    def to_exception(self) -> TikTokProxyError:
        details: Dict[str, Any] = {}
        if self.payload is not None:
            details["payload"] = self.payload

        if self.kind == ErrorKind.BUSINESS:
            return BusinessError(self.message, self.code, details)
        if self.kind == ErrorKind.UPSTREAM_HTTP:
            return UpstreamHTTPError(self.message, self.status or 500, details)
        if self.kind == ErrorKind.INVALID_RESPONSE:
            return InvalidResponseError(self.message, self.status, details)
        if self.kind == ErrorKind.CONFIGURATION:
            return ConfigurationError(self.message, details)
        return TransportError(self.message, details)

    def raise_for_error(self) -> None:
        """Raise the typed exception matching this failure."""
        raise self.to_exception()

    def unwrap(self) -> Any:
        self.raise_for_error()


Result = Union[Ok, Err]
