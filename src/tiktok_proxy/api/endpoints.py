"""TikTok Shop Open API endpoint paths and host routing."""

# Token / authorization family (auth host, secret-as-parameter)
TOKEN_PATH_PREFIX = "/api/v2/token/"
GET_ACCESS_TOKEN = "/api/v2/token/get"
REFRESH_ACCESS_TOKEN = "/api/v2/token/refresh"

# Commerce API (main host, HMAC-signed)
GET_AUTHORIZED_SHOPS = "/authorization/202309/shops"
SEARCH_ORDERS = "/order/202309/orders/search"
GET_ORDER_DETAIL = "/order/202309/orders"
SEARCH_PACKAGES = "/fulfillment/202309/packages/search"
SHIP_PACKAGE = "/fulfillment/202309/packages/{package_id}/ship"
GET_SHIPPING_DOCUMENT = "/fulfillment/202309/packages/{package_id}/shipping_documents"

AUTH_PATH_PREFIXES = (TOKEN_PATH_PREFIX,)


def is_auth_endpoint(endpoint: str) -> bool:
    """True for the token exchange/refresh family served by the auth host."""
    return endpoint.startswith(AUTH_PATH_PREFIXES)


def resolve_base_url(endpoint: str, api_host: str, auth_host: str) -> str:
    """Pick the upstream host for an endpoint by static path prefix."""
    host = auth_host if is_auth_endpoint(endpoint) else api_host
    return host.rstrip("/")
