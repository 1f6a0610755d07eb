import json

import httpx
import pytest

from tiktok_proxy.integrations.document_merge import DocumentMergeClient
from tiktok_proxy.services.fulfillment_service import FulfillmentService, first_package_id


def order(order_id, status="AWAITING_SHIPMENT", package_id="auto"):
    packages = [] if package_id is None else [{"id": f"PKG-{order_id}" if package_id == "auto" else package_id}]
    return {"id": order_id, "status": status, "packages": packages}


def label_response(request):
    package_id = request.url.path.split("/")[-2]
    return httpx.Response(
        200, json={"code": 0, "message": "Success", "data": {"doc_url": f"https://labels.test/{package_id}.pdf"}}
    )


class FakeMerge:
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def merge(self, document_urls):
        self.calls.append(list(document_urls))
        return self.result


@pytest.fixture
def labels(upstream):
    for oid in ("1", "2", "3"):
        upstream.responses[f"/fulfillment/202309/packages/PKG-{oid}/shipping_documents"] = label_response
    return upstream


def test_first_package_id():
    assert first_package_id(order("1")) == "PKG-1"
    assert first_package_id(order("1", package_id=None)) is None
    assert first_package_id({"id": "1"}) is None


@pytest.mark.asyncio
async def test_ship_orders_only_awaiting_shipment(sdk, labels, credentials):
    service = FulfillmentService(sdk, delay_seconds=0)
    orders = [order("1"), order("2", status="UNPAID"), order("3")]

    results = await service.ship_orders(credentials, orders)

    assert [r["order_id"] for r in results] == ["1", "3"]
    assert all(r["success"] for r in results)
    assert results[0]["waybill_url"] == "https://labels.test/PKG-1.pdf"

    paths = [r.url.path for r in labels.requests]
    assert paths == [
        "/fulfillment/202309/packages/PKG-1/ship",
        "/fulfillment/202309/packages/PKG-1/shipping_documents",
        "/fulfillment/202309/packages/PKG-3/ship",
        "/fulfillment/202309/packages/PKG-3/shipping_documents",
    ]


@pytest.mark.asyncio
async def test_ship_order_without_package(sdk, upstream, credentials):
    service = FulfillmentService(sdk, delay_seconds=0)

    result = await service.ship_order(credentials, order("9", package_id=None))

    assert not result["success"]
    assert result["error"] == "No package found for this order"
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_ship_failure_is_reported_per_order(sdk, labels, credentials):
    labels.responses["/fulfillment/202309/packages/PKG-1/ship"] = {"code": 21011001, "message": "package already shipped"}
    service = FulfillmentService(sdk, delay_seconds=0)

    results = await service.ship_orders(credentials, [order("1"), order("2")])

    assert results[0] == {
        "order_id": "1",
        "success": False,
        "waybill_url": None,
        "error": "package already shipped",
    }
    assert results[1]["success"]


@pytest.mark.asyncio
async def test_label_failure_keeps_shipment(sdk, upstream, credentials):
    upstream.responses["/fulfillment/202309/packages/PKG-1/shipping_documents"] = {
        "code": 21001001,
        "message": "document not ready",
    }
    service = FulfillmentService(sdk, delay_seconds=0)

    result = await service.ship_order(credentials, order("1"))

    assert result["success"]
    assert result["waybill_url"] is None


@pytest.mark.asyncio
async def test_ship_orders_throttles_between_orders(sdk, labels, credentials, monkeypatch):
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    monkeypatch.setattr("tiktok_proxy.services.fulfillment_service.asyncio.sleep", fake_sleep)
    service = FulfillmentService(sdk, delay_seconds=0.5)

    await service.ship_orders(credentials, [order("1"), order("2"), order("3")])

    assert sleeps == [0.5, 0.5]


@pytest.mark.asyncio
async def test_print_single_waybill_returns_url(sdk, labels, credentials):
    merge = FakeMerge(b"%PDF")
    service = FulfillmentService(sdk, merge_client=merge, delay_seconds=0)

    result = await service.print_waybills(credentials, [order("1"), order("2", package_id=None)])

    assert result == {"document": None, "urls": ["https://labels.test/PKG-1.pdf"]}
    assert merge.calls == []


@pytest.mark.asyncio
async def test_print_multiple_waybills_merges(sdk, labels, credentials):
    merge = FakeMerge(b"%PDF-merged")
    service = FulfillmentService(sdk, merge_client=merge, delay_seconds=0)

    result = await service.print_waybills(credentials, [order("1"), order("2")])

    assert result == {"document": b"%PDF-merged", "urls": []}
    assert merge.calls == [["https://labels.test/PKG-1.pdf", "https://labels.test/PKG-2.pdf"]]


@pytest.mark.asyncio
async def test_print_falls_back_when_merge_fails(sdk, labels, credentials):
    service = FulfillmentService(sdk, merge_client=FakeMerge(None), delay_seconds=0)

    result = await service.print_waybills(credentials, [order("1"), order("2")])

    assert result["document"] is None
    assert len(result["urls"]) == 2


@pytest.mark.asyncio
async def test_merge_client_posts_urls():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, content=b"%PDF-1.7")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    merge = DocumentMergeClient("https://merge.test/merge-waybills", api_key="key", client=client)

    document = await merge.merge(["https://a.pdf", "https://b.pdf"])

    assert document == b"%PDF-1.7"
    assert seen[0].headers["authorization"] == "Bearer key"
    assert json.loads(seen[0].content) == {"waybillUrls": ["https://a.pdf", "https://b.pdf"]}


@pytest.mark.asyncio
async def test_merge_client_returns_none_on_failure():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500, text="boom")))
    merge = DocumentMergeClient("https://merge.test/merge-waybills", client=client)

    assert await merge.merge(["https://a.pdf", "https://b.pdf"]) is None


@pytest.mark.asyncio
async def test_merge_client_disabled_without_url():
    assert await DocumentMergeClient().merge(["https://a.pdf"]) is None
