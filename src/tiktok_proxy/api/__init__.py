"""TikTok Shop Open API module."""

from .client import TikTokShopClient
from .dispatcher import Dispatcher
from .endpoints import is_auth_endpoint, resolve_base_url

__all__ = ["Dispatcher", "TikTokShopClient", "is_auth_endpoint", "resolve_base_url"]
