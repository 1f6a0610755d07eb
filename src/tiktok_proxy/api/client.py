"""TikTok Shop Open API client."""

from typing import Any, Dict, List, Optional

from tiktok_proxy.api import endpoints
from tiktok_proxy.api.dispatcher import Dispatcher
from tiktok_proxy.config.constants import (
    DEFAULT_DOCUMENT_SIZE,
    DEFAULT_DOCUMENT_TYPE,
    DEFAULT_HANDOVER_METHOD,
    DEFAULT_PAGE_SIZE,
)
from tiktok_proxy.core.errors import BusinessError, ConfigurationError
from tiktok_proxy.core.logger import setup_logger
from tiktok_proxy.models.credentials import Credentials
from tiktok_proxy.models.proxy import ProxyRequest, Result

logger = setup_logger(__name__)

# Body filters accepted by the order and package search endpoints
ORDER_SEARCH_FILTERS = ("order_status", "create_time_ge", "create_time_lt", "update_time_ge", "update_time_lt")
PACKAGE_SEARCH_FILTERS = ("create_time_ge", "create_time_lt", "update_time_ge", "update_time_lt")


class TikTokShopClient:
    """One method per marketplace operation, all funneled through the dispatcher.

    Credentials are passed into every call; the client itself holds no
    seller state and can serve several shops concurrently.
    """

    def __init__(self, dispatcher: Dispatcher):
        self.dispatcher = dispatcher

    async def call(
        self,
        endpoint: str,
        method: str,
        params: Dict[str, Any],
        body: Optional[Dict[str, Any]],
        app_secret: str,
        access_token: Optional[str],
    ) -> Result:
        """Dispatch a logical request and return the tagged result."""
        request = ProxyRequest(
            method=method,
            endpoint=endpoint,
            params=params,
            body=body,
            app_secret=app_secret,
            access_token=access_token,
        )
        return await self.dispatcher.dispatch(request)

    async def _call(
        self,
        endpoint: str,
        method: str,
        params: Dict[str, Any],
        body: Optional[Dict[str, Any]],
        app_secret: str,
        access_token: Optional[str],
    ) -> Any:
        result = await self.call(endpoint, method, params, body, app_secret, access_token)
        return result.unwrap()

    @staticmethod
    def _shop_params(credentials: Credentials) -> Dict[str, Any]:
        if not credentials.app_key:
            raise ConfigurationError("App key is required")
        if not credentials.shop_cipher:
            raise ConfigurationError("Shop cipher is required; look up authorized shops first")
        return {"app_key": credentials.app_key, "shop_cipher": credentials.shop_cipher}

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    async def get_access_token(self, app_key: str, app_secret: str, auth_code: str) -> Dict[str, Any]:
        """Exchange an OAuth authorization code for access and refresh tokens."""
        if not app_key:
            raise ConfigurationError("App key is required")

        return await self._call(
            endpoints.GET_ACCESS_TOKEN,
            "GET",
            {"app_key": app_key, "grant_type": "authorized_code", "auth_code": auth_code},
            None,
            app_secret,
            None,
        )

    async def refresh_access_token(self, app_key: str, app_secret: str, refresh_token: str) -> Dict[str, Any]:
        """Obtain a new access token from a refresh token."""
        if not app_key:
            raise ConfigurationError("App key is required")

        return await self._call(
            endpoints.REFRESH_ACCESS_TOKEN,
            "GET",
            {"app_key": app_key, "grant_type": "refresh_token", "refresh_token": refresh_token},
            None,
            app_secret,
            None,
        )

    async def get_authorized_shops(self, credentials: Credentials) -> Dict[str, Any]:
        """List shops that authorized the app, including each shop cipher."""
        if not credentials.app_key:
            raise ConfigurationError("App key is required")

        return await self._call(
            endpoints.GET_AUTHORIZED_SHOPS,
            "GET",
            {"app_key": credentials.app_key},
            None,
            credentials.app_secret,
            credentials.access_token,
        )

    async def connect_shop(self, app_key: str, app_secret: str, auth_code: str) -> Credentials:
        """
        Run the full OAuth connection: token exchange, then shop lookup.

        Returns:
            Credentials scoped to the first authorized shop

        Raises:
            BusinessError: If the seller has no authorized shops
        """
        token_data = await self.get_access_token(app_key, app_secret, auth_code)
        credentials = Credentials(
            app_key=app_key,
            app_secret=app_secret,
            access_token=token_data.get("access_token"),
            refresh_token=token_data.get("refresh_token"),
            access_token_expire_in=token_data.get("access_token_expire_in"),
        )

        shops = (await self.get_authorized_shops(credentials) or {}).get("shops") or []
        if not shops:
            raise BusinessError("No authorized shops found")

        shop = shops[0]
        logger.info(f"Connected shop {shop.get('name')} ({len(shops)} authorized)")
        return credentials.model_copy(
            update={"shop_cipher": shop.get("cipher"), "shop_name": shop.get("name")}
        )

    async def refresh_credentials(self, credentials: Credentials) -> Credentials:
        """Return a copy of the credentials carrying freshly refreshed tokens."""
        if not credentials.refresh_token:
            raise ConfigurationError("No refresh token available for token refresh")

        token_data = await self.refresh_access_token(
            credentials.app_key, credentials.app_secret, credentials.refresh_token
        )
        return credentials.model_copy(
            update={
                "access_token": token_data.get("access_token"),
                "refresh_token": token_data.get("refresh_token") or credentials.refresh_token,
                "access_token_expire_in": token_data.get("access_token_expire_in"),
            }
        )

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def search_orders(
        self,
        credentials: Credentials,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Search orders.

        Args:
            credentials: Shop credentials
            filters: page_size / page_token go in the query string; order
                status and time window go in the body

        Returns:
            Response data with ``orders`` and ``next_page_token``
        """
        filters = filters or {}
        params = self._shop_params(credentials)
        params["page_size"] = filters.get("page_size") or DEFAULT_PAGE_SIZE
        if filters.get("page_token"):
            params["page_token"] = filters["page_token"]

        body = {key: filters[key] for key in ORDER_SEARCH_FILTERS if filters.get(key)}

        return await self._call(
            endpoints.SEARCH_ORDERS,
            "POST",
            params,
            body,
            credentials.app_secret,
            credentials.access_token,
        )

    async def get_order_details(self, credentials: Credentials, order_ids: List[str]) -> Dict[str, Any]:
        """Fetch full order details for a batch of order IDs."""
        params = self._shop_params(credentials)
        params["ids"] = ",".join(order_ids)

        return await self._call(
            endpoints.GET_ORDER_DETAIL,
            "GET",
            params,
            None,
            credentials.app_secret,
            credentials.access_token,
        )

    # ------------------------------------------------------------------
    # Fulfillment
    # ------------------------------------------------------------------

    async def search_packages(
        self,
        credentials: Credentials,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Search packages; same pagination and body conventions as orders."""
        filters = filters or {}
        params = self._shop_params(credentials)
        params["page_size"] = filters.get("page_size") or DEFAULT_PAGE_SIZE
        if filters.get("page_token"):
            params["page_token"] = filters["page_token"]

        body = {key: filters[key] for key in PACKAGE_SEARCH_FILTERS if filters.get(key)}

        return await self._call(
            endpoints.SEARCH_PACKAGES,
            "POST",
            params,
            body,
            credentials.app_secret,
            credentials.access_token,
        )

    async def ship_package(
        self,
        credentials: Credentials,
        package_id: str,
        handover_method: str = DEFAULT_HANDOVER_METHOD,
    ) -> Dict[str, Any]:
        """Mark a package as ready to ship with the given handover method."""
        if not package_id:
            raise ConfigurationError("Package ID is required")

        return await self._call(
            endpoints.SHIP_PACKAGE.format(package_id=package_id),
            "POST",
            self._shop_params(credentials),
            {"handover_method": handover_method},
            credentials.app_secret,
            credentials.access_token,
        )

    async def get_shipping_document(
        self,
        credentials: Credentials,
        package_id: str,
        document_type: str = DEFAULT_DOCUMENT_TYPE,
        document_size: int = DEFAULT_DOCUMENT_SIZE,
    ) -> Dict[str, Any]:
        """Get the shipping label for a package; ``doc_url`` points at the PDF."""
        if not package_id:
            raise ConfigurationError("Package ID is required")

        params = self._shop_params(credentials)
        params["document_type"] = document_type
        params["document_size"] = document_size

        return await self._call(
            endpoints.GET_SHIPPING_DOCUMENT.format(package_id=package_id),
            "GET",
            params,
            None,
            credentials.app_secret,
            credentials.access_token,
        )
