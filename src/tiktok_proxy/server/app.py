"""FastAPI application setup and configuration."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tiktok_proxy import __version__
from tiktok_proxy.api.client import TikTokShopClient
from tiktok_proxy.api.dispatcher import Dispatcher
from tiktok_proxy.config.constants import CORS_HEADERS
from tiktok_proxy.config.settings import Settings, settings as default_settings
from tiktok_proxy.core.credential_store import JsonCredentialStore
from tiktok_proxy.core.logger import setup_logger
from tiktok_proxy.core.monitoring import init_monitoring
from tiktok_proxy.integrations.document_merge import DocumentMergeClient
from tiktok_proxy.services.fulfillment_service import FulfillmentService

logger = setup_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    dispatcher: Optional[Dispatcher] = None,
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Proxy started (api_host={settings.api_host}, auth_host={settings.auth_host}, "
            f"clock_skew={settings.clock_skew_seconds}s)"
        )
        yield

        logger.info("Starting graceful shutdown...")
        try:
            await app.state.dispatcher.aclose()
            logger.info("Graceful shutdown completed successfully")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}", exc_info=True)

    app = FastAPI(
        title="TikTok Shop Signing Proxy",
        version=__version__,
        description="Signs TikTok Shop Open API requests and relays them for browser callers",
        lifespan=lifespan,
    )

    init_monitoring(settings.glitchtip_dsn, settings.environment)

    # Permissive CORS for browser callers; any method or request header passes preflight
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[CORS_HEADERS["Access-Control-Allow-Origin"]],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.dispatcher = dispatcher or Dispatcher.from_settings(settings)
    app.state.client = TikTokShopClient(app.state.dispatcher)
    app.state.credential_store = JsonCredentialStore(settings.credentials_file)
    app.state.fulfillment = FulfillmentService(
        app.state.client,
        DocumentMergeClient(settings.merge_service_url, settings.merge_service_key),
        settings.bulk_action_delay_seconds,
    )

    from tiktok_proxy.server import routes

    app.include_router(routes.router)

    return app
