"""Data models for credentials, proxied requests and dispatch results."""

from .credentials import Credentials
from .fulfillment import PrintWaybillsRequest, ShipOrdersRequest
from .proxy import Err, Ok, ProxyRequest, Result, SignedRequest, UpstreamResponse

__all__ = [
    "Credentials",
    "Err",
    "Ok",
    "PrintWaybillsRequest",
    "ProxyRequest",
    "Result",
    "ShipOrdersRequest",
    "SignedRequest",
    "UpstreamResponse",
]
