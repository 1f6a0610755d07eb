"""Shared fixtures: credentials and a dispatcher backed by a mock upstream."""

import json

import httpx
import pytest

from tiktok_proxy.api.client import TikTokShopClient
from tiktok_proxy.api.dispatcher import Dispatcher
from tiktok_proxy.models.credentials import Credentials

API_HOST = "https://open-api.test"
AUTH_HOST = "https://auth.test"
FIXED_NOW = 1700000320


class FakeUpstream:
    """Records outbound requests and answers from a per-path table."""

    def __init__(self, responses=None) -> None:
        self.requests = []
        self.responses = dict(responses or {})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.get(request.url.path)
        if response is None:
            return httpx.Response(200, json={"code": 0, "message": "Success", "data": {}})
        if callable(response):
            return response(request)
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_body(self):
        content = self.last.content
        return json.loads(content) if content else None


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def dispatcher(upstream):
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    return Dispatcher(
        api_host=API_HOST,
        auth_host=AUTH_HOST,
        clock_skew_seconds=320,
        client=client,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def sdk(dispatcher):
    return TikTokShopClient(dispatcher)


@pytest.fixture
def credentials():
    return Credentials(
        app_key="abc",
        app_secret="s3cr3t",
        access_token="tok-123",
        refresh_token="ref-456",
        shop_cipher="xyz",
    )
