"""
GlitchTip Error Monitoring Utilities

Helper functions for error tracking and context management. Every event and
breadcrumb passes through ``scrub_event`` so credentials never leave the
proxy.
"""

import re
from typing import Any, Dict, Optional

from tiktok_proxy.core.logger import setup_logger

logger = setup_logger(__name__)

FILTERED = "[Filtered]"

# Compared after lowercasing and dropping "_" and "-"
SENSITIVE_KEYS = {
    "appsecret",
    "accesstoken",
    "refreshtoken",
    "authcode",
    "sign",
    "xttsaccesstoken",
    "authorization",
}

# Secrets embedded in URLs or query strings
SENSITIVE_QUERY_RE = re.compile(
    r"(?i)\b(app_secret|access_token|refresh_token|auth_code|sign)=[^&#\s\"']*"
)


def _is_sensitive_key(key: Any) -> bool:
    if not isinstance(key, str):
        return False
    return key.lower().replace("_", "").replace("-", "") in SENSITIVE_KEYS


def scrub_value(value: Any) -> Any:
    """Recursively replace sensitive keys and query-string secrets."""
    if isinstance(value, dict):
        return {
            key: FILTERED if _is_sensitive_key(key) else scrub_value(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [scrub_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(scrub_value(item) for item in value)
    if isinstance(value, str):
        return SENSITIVE_QUERY_RE.sub(lambda m: f"{m.group(1)}={FILTERED}", value)
    return value


def scrub_event(event: Dict[str, Any], hint: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """``before_send`` hook."""
    return scrub_value(event)


def scrub_breadcrumb(crumb: Dict[str, Any], hint: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """``before_breadcrumb`` hook; outbound httpx breadcrumbs carry query strings."""
    return scrub_value(crumb)


def sentry_options(dsn: str, environment: str) -> Dict[str, Any]:
    """Keyword arguments for ``sentry_sdk.init``."""
    import logging

    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration
    from sentry_sdk.scrubber import DEFAULT_DENYLIST, EventScrubber

    denylist = list(DEFAULT_DENYLIST) + sorted(
        SENSITIVE_KEYS | {"app_secret", "access_token", "refresh_token", "auth_code", "x-tts-access-token"}
    )

    return {
        "dsn": dsn,
        "environment": environment,
        "integrations": [
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(level=None, event_level=logging.ERROR),
        ],
        "traces_sample_rate": 0.1,
        "profiles_sample_rate": 0.0,
        "send_default_pii": False,
        # Frame locals and request bodies hold the app secret
        "include_local_variables": False,
        "max_request_body_size": "never",
        "event_scrubber": EventScrubber(denylist=denylist),
        "before_send": scrub_event,
        "before_breadcrumb": scrub_breadcrumb,
    }


def init_monitoring(dsn: Optional[str], environment: str) -> bool:
    """
    Initialize GlitchTip (Sentry-compatible) monitoring.

    Returns:
        True if monitoring was initialized
    """
    if not dsn:
        return False

    try:
        import sentry_sdk

        sentry_sdk.init(**sentry_options(dsn, environment))
        logger.info("GlitchTip error monitoring initialized")
        return True
    except Exception as e:
        logger.error(f"Failed to initialize GlitchTip: {e}")
        return False


def set_proxy_context(
    endpoint: str,
    method: str,
    shop_cipher: Optional[str] = None,
) -> None:
    """
    Set proxied-call context for error tracking.

    Only routing information is attached; secrets and tokens never are.
    """
    try:
        import sentry_sdk

        sentry_sdk.set_tag("proxy.endpoint", endpoint)
        sentry_sdk.set_tag("proxy.method", method)
        sentry_sdk.set_context(
            "proxy",
            {"endpoint": endpoint, "method": method, "has_shop_cipher": bool(shop_cipher)},
        )
    except ImportError:
        pass
    except Exception as e:
        logger.warning(f"Failed to set proxy context: {e}")


def capture_exception(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: str = "error",
) -> None:
    """
    Capture an exception and send to GlitchTip.

    Args:
        error: The exception to capture
        context: Additional context data
        level: Error level (error, warning, info)
    """
    try:
        import sentry_sdk

        if context:
            with sentry_sdk.push_scope() as scope:
                scope.set_context("custom", context)
                scope.set_level(level)
                sentry_sdk.capture_exception(error)
        else:
            sentry_sdk.capture_exception(error, level=level)
    except ImportError:
        pass
    except Exception as e:
        logger.warning(f"Failed to capture exception in GlitchTip: {e}")
