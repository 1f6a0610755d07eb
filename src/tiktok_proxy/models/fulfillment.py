"""Request models for the bulk fulfillment endpoints."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from tiktok_proxy.config.constants import DEFAULT_HANDOVER_METHOD
from tiktok_proxy.models.credentials import Credentials


class PrintWaybillsRequest(BaseModel):
    """Orders whose labels should be collected and merged."""

    credentials: Credentials
    orders: List[Dict[str, Any]] = Field(default_factory=list)


class ShipOrdersRequest(PrintWaybillsRequest):
    """Orders to ship; only those awaiting shipment are processed."""

    handover_method: str = Field(DEFAULT_HANDOVER_METHOD, description="PICKUP or DROP_OFF")
