"""Bulk ship and waybill printing built on the SDK."""

import asyncio
from typing import Any, Dict, List, Optional, TypedDict

from tiktok_proxy.api.client import TikTokShopClient
from tiktok_proxy.config.constants import AWAITING_SHIPMENT_STATUS, DEFAULT_HANDOVER_METHOD
from tiktok_proxy.core.errors import TikTokProxyError
from tiktok_proxy.core.logger import setup_logger
from tiktok_proxy.integrations.document_merge import DocumentMergeClient
from tiktok_proxy.models.credentials import Credentials

logger = setup_logger(__name__)


class ShipResult(TypedDict):
    """Outcome of shipping one order."""

    order_id: Optional[str]
    success: bool
    waybill_url: Optional[str]
    error: Optional[str]


class WaybillPrintResult(TypedDict):
    """Outcome of a bulk waybill print."""

    document: Optional[bytes]  # merged PDF, when more than one label merged
    urls: List[str]  # labels to open individually (single label or merge fallback)


def first_package_id(order: Dict[str, Any]) -> Optional[str]:
    """Package ID of the order's first package, if any."""
    packages = order.get("packages") or []
    if not packages:
        return None
    return packages[0].get("id")


class FulfillmentService:
    """Sequential, throttled bulk operations over many orders.

    Orders are processed one at a time with ``delay_seconds`` between them to
    stay under upstream rate limits.
    """

    def __init__(
        self,
        client: TikTokShopClient,
        merge_client: Optional[DocumentMergeClient] = None,
        delay_seconds: float = 0.5,
    ):
        self.client = client
        self.merge_client = merge_client or DocumentMergeClient()
        self.delay_seconds = delay_seconds

    async def _throttle(self, index: int, total: int) -> None:
        if self.delay_seconds > 0 and index < total - 1:
            await asyncio.sleep(self.delay_seconds)

    async def fetch_waybill_url(self, credentials: Credentials, package_id: str) -> Optional[str]:
        """Label URL for a package, or None when the document is unavailable."""
        try:
            document = await self.client.get_shipping_document(credentials, package_id)
        except TikTokProxyError as e:
            logger.warning(f"Could not get waybill for package {package_id}: {e.kind.value}: {e.message}")
            return None
        return (document or {}).get("doc_url")

    async def ship_order(
        self,
        credentials: Credentials,
        order: Dict[str, Any],
        handover_method: str = DEFAULT_HANDOVER_METHOD,
    ) -> ShipResult:
        """Ship one order's first package and try to fetch its label."""
        order_id = order.get("id")
        package_id = first_package_id(order)
        if not package_id:
            return ShipResult(
                order_id=order_id, success=False, waybill_url=None,
                error="No package found for this order",
            )

        try:
            await self.client.ship_package(credentials, package_id, handover_method)
        except TikTokProxyError as e:
            logger.error(f"Failed to ship order {order_id}: {e.kind.value}: {e.message}")
            return ShipResult(order_id=order_id, success=False, waybill_url=None, error=e.message)

        # Label failure does not undo the shipment
        waybill_url = await self.fetch_waybill_url(credentials, package_id)
        logger.info(f"Shipped order {order_id} (waybill={'yes' if waybill_url else 'no'})")
        return ShipResult(order_id=order_id, success=True, waybill_url=waybill_url, error=None)

    async def ship_orders(
        self,
        credentials: Credentials,
        orders: List[Dict[str, Any]],
        handover_method: str = DEFAULT_HANDOVER_METHOD,
    ) -> List[ShipResult]:
        """Ship every order awaiting shipment, one after another."""
        shippable = [o for o in orders if o.get("status") == AWAITING_SHIPMENT_STATUS]
        skipped = len(orders) - len(shippable)
        if skipped:
            logger.info(f"Skipping {skipped} orders not awaiting shipment")

        results = []
        for index, order in enumerate(shippable):
            results.append(await self.ship_order(credentials, order, handover_method))
            await self._throttle(index, len(shippable))

        succeeded = sum(1 for r in results if r["success"])
        logger.info(f"Bulk ship finished: {succeeded}/{len(results)} shipped")
        return results

    async def collect_waybills(
        self,
        credentials: Credentials,
        orders: List[Dict[str, Any]],
    ) -> List[str]:
        """Label URLs for every order that has a package."""
        with_packages = [o for o in orders if first_package_id(o)]

        urls = []
        for index, order in enumerate(with_packages):
            url = await self.fetch_waybill_url(credentials, first_package_id(order))
            if url:
                urls.append(url)
            await self._throttle(index, len(with_packages))
        return urls

    async def print_waybills(
        self,
        credentials: Credentials,
        orders: List[Dict[str, Any]],
    ) -> WaybillPrintResult:
        """
        Collect labels and merge them into one PDF.

        A single label is returned as its URL. When merging fails the
        individual URLs are returned instead.
        """
        urls = await self.collect_waybills(credentials, orders)

        if len(urls) <= 1:
            return WaybillPrintResult(document=None, urls=urls)

        merged = await self.merge_client.merge(urls)
        if merged is None:
            logger.warning(f"Could not merge PDFs, returning {len(urls)} individual waybills")
            return WaybillPrintResult(document=None, urls=urls)

        return WaybillPrintResult(document=merged, urls=[])
