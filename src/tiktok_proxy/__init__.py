"""TikTok Shop signing proxy and order-fulfillment SDK."""

__version__ = "1.0.0"
