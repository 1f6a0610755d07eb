"""Core module - Logging, request signing, errors and credential storage."""

from tiktok_proxy.core.errors import (
    BusinessError,
    ConfigurationError,
    ErrorKind,
    InvalidResponseError,
    TikTokProxyError,
    TransportError,
    UpstreamHTTPError,
)
from tiktok_proxy.core.logger import setup_logger
from tiktok_proxy.core.signature import canonicalize, sign, sign_request

__all__ = [
    "BusinessError",
    "ConfigurationError",
    "ErrorKind",
    "InvalidResponseError",
    "TikTokProxyError",
    "TransportError",
    "UpstreamHTTPError",
    "canonicalize",
    "setup_logger",
    "sign",
    "sign_request",
]
