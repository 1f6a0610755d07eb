"""TikTok Shop Signing Proxy - Main Entry Point."""

import os

from tiktok_proxy.config.settings import settings
from tiktok_proxy.server.app import create_app

# Create FastAPI application
app = create_app()

if __name__ == "__main__":
    import uvicorn

    reload = os.getenv("RELOAD", "false").lower() == "true"

    uvicorn.run(
        "tiktok_proxy.main:app",
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
        timeout_keep_alive=5,
        access_log=False,  # access log would print query strings carrying signatures
    )
