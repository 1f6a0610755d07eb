"""
Centralized application constants.

Single point of truth for the TikTok Shop protocol constants shared by the
signer, the dispatcher and the SDK.
"""

# ==============================================================================
# SIGNED REQUESTS
# ==============================================================================

# Parameters that never take part in the signed material
SIGN_EXCLUDED_PARAMS = ("sign", "access_token")

SIGN_PARAM = "sign"
TIMESTAMP_PARAM = "timestamp"
APP_SECRET_PARAM = "app_secret"

# Access token travels as a header, never in the query string
ACCESS_TOKEN_HEADER = "x-tts-access-token"

# ==============================================================================
# RESULT CODES
# ==============================================================================

# Marketplace business result code for success
RESULT_CODE_OK = 0

# ==============================================================================
# FULFILLMENT
# ==============================================================================

AWAITING_SHIPMENT_STATUS = "AWAITING_SHIPMENT"

DEFAULT_PAGE_SIZE = 20
DEFAULT_HANDOVER_METHOD = "PICKUP"
DEFAULT_DOCUMENT_TYPE = "SHIPPING_LABEL"
DEFAULT_DOCUMENT_SIZE = 0

# Document merge collaborator timeout (seconds)
MERGE_SERVICE_TIMEOUT = 60.0

# ==============================================================================
# HTTP BOUNDARY
# ==============================================================================

PROXY_ROUTE = "/api/tiktok/proxy"
SHIP_ORDERS_ROUTE = "/api/tiktok/fulfillment/ship"
PRINT_WAYBILLS_ROUTE = "/api/tiktok/fulfillment/waybills"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
