"""API routes for the signing proxy."""

from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from tiktok_proxy import __version__
from tiktok_proxy.config.constants import (
    CORS_HEADERS,
    PRINT_WAYBILLS_ROUTE,
    PROXY_ROUTE,
    SHIP_ORDERS_ROUTE,
)
from tiktok_proxy.core.errors import ConfigurationError, ErrorKind
from tiktok_proxy.core.logger import setup_logger
from tiktok_proxy.core.monitoring import capture_exception, set_proxy_context
from tiktok_proxy.models.fulfillment import PrintWaybillsRequest, ShipOrdersRequest
from tiktok_proxy.models.proxy import Err, ProxyRequest

logger = setup_logger(__name__)
router = APIRouter()

MISSING_FIELDS_ERROR = "Missing required fields: endpoint, appSecret"


def cors_json(content: Any, status_code: int = 200) -> JSONResponse:
    """JSON response carrying the permissive CORS headers."""
    return JSONResponse(content=content, status_code=status_code, headers=dict(CORS_HEADERS))


@router.get("/")
async def root() -> dict:
    """Root endpoint with basic service info."""
    return {
        "service": "TikTok Shop Signing Proxy",
        "version": __version__,
        "endpoints": {
            "proxy": f"POST {PROXY_ROUTE}",
            "ship_orders": f"POST {SHIP_ORDERS_ROUTE}",
            "print_waybills": f"POST {PRINT_WAYBILLS_ROUTE}",
            "health": "GET /health",
            "docs": "GET /docs",
        },
    }


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint for monitoring."""
    settings = request.app.state.settings

    health_status = {
        "status": "healthy",
        "service": "tiktok-shop-proxy",
        "checks": {
            "api_host": "ok" if settings.api_host else "missing",
            "auth_host": "ok" if settings.auth_host else "missing",
            "merge_service": "enabled" if settings.merge_service_url else "disabled",
            "credentials": (
                "stored" if request.app.state.credential_store.path.exists() else "not_stored"
            ),
            "clock_skew_seconds": settings.clock_skew_seconds,
        },
    }

    if not settings.api_host or not settings.auth_host:
        health_status["status"] = "degraded"

    return health_status


@router.options(PROXY_ROUTE)
async def proxy_preflight() -> Response:
    """CORS preflight: always succeeds."""
    return cors_json({})


@router.post(PROXY_ROUTE)
async def proxy(request: Request) -> Response:
    """
    Sign and relay one TikTok Shop API call.

    Body: ``{method, endpoint, params, body, appSecret, accessToken}``.

    Status policy:
        - upstream 2xx: HTTP 200 with the upstream body, business result
          code embedded (non-zero codes are not mapped to HTTP errors)
        - upstream non-2xx: upstream status and body relayed
        - transport or unparseable upstream body: HTTP 502
        - missing or invalid fields: HTTP 400
    """
    try:
        raw = await request.json()
    except ValueError:
        return cors_json({"error": "Request body must be JSON"}, 400)

    if not isinstance(raw, dict) or not raw.get("endpoint") or not raw.get("appSecret"):
        return cors_json({"error": MISSING_FIELDS_ERROR}, 400)

    try:
        proxy_request = ProxyRequest(**raw)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        return cors_json({"error": "Invalid request", "fields": fields}, 400)

    set_proxy_context(
        proxy_request.endpoint,
        proxy_request.method,
        str(proxy_request.params.get("shop_cipher") or "") or None,
    )

    dispatcher = request.app.state.dispatcher
    try:
        result = await dispatcher.dispatch(proxy_request)
    except ConfigurationError as e:
        return cors_json({"error": e.message}, 400)
    except Exception as e:
        logger.error(f"TikTok API proxy error: {type(e).__name__}", exc_info=True)
        capture_exception(e, {"endpoint": proxy_request.endpoint})
        return cors_json({"error": "Internal server error", "message": type(e).__name__}, 500)

    if result.ok:
        return cors_json(result.response.payload, 200)

    return error_response(result)


def error_response(result: Err) -> Response:
    """Map a failed dispatch to the HTTP status policy."""
    if result.kind == ErrorKind.BUSINESS:
        return cors_json(result.payload, 200)

    if result.kind == ErrorKind.UPSTREAM_HTTP:
        status = result.status or 502
        if isinstance(result.payload, str):
            # Non-JSON error page
            return Response(
                content=result.payload,
                status_code=status,
                media_type="text/plain",
                headers=dict(CORS_HEADERS),
            )
        if result.payload is None:
            return Response(status_code=status, headers=dict(CORS_HEADERS))
        return cors_json(result.payload, status)

    if result.kind == ErrorKind.INVALID_RESPONSE and result.payload is not None:
        # Valid JSON without a result code is still relayed as-is
        return cors_json(result.payload, result.status or 200)

    return cors_json(
        {"error": "Upstream request failed", "kind": result.kind.value, "message": result.message},
        502,
    )


@router.post(SHIP_ORDERS_ROUTE)
async def ship_orders(payload: ShipOrdersRequest, request: Request) -> Response:
    """
    Ship every order awaiting shipment and fetch its label.

    Orders are processed one at a time; each gets its own result entry.
    """
    fulfillment = request.app.state.fulfillment
    results = await fulfillment.ship_orders(
        payload.credentials, payload.orders, payload.handover_method
    )
    return cors_json({"results": results})


@router.post(PRINT_WAYBILLS_ROUTE)
async def print_waybills(payload: PrintWaybillsRequest, request: Request) -> Response:
    """
    Collect shipping labels for the given orders.

    Returns the merged PDF when more than one label merged, otherwise the
    individual label URLs.
    """
    fulfillment = request.app.state.fulfillment
    printed = await fulfillment.print_waybills(payload.credentials, payload.orders)

    if printed["document"] is not None:
        return Response(
            content=printed["document"],
            media_type="application/pdf",
            headers={**CORS_HEADERS, "Content-Disposition": 'inline; filename="waybills.pdf"'},
        )

    return cors_json({"urls": printed["urls"]})
