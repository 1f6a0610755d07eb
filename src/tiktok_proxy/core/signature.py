"""TikTok Shop request signing.

The marketplace authenticates every shop-scoped call with an HMAC-SHA256
signature computed over a canonical representation of the request:

    app_secret + path + key1value1key2value2... + json_body + app_secret

keyed by the app secret and rendered as lowercase hex. Parameter keys are
sorted byte-wise, ``sign`` and ``access_token`` never take part, and only
scalar values are signed. The body is appended in the exact compact form that
goes out on the wire, and only when it has at least one key.
"""

import hashlib
import hmac
import json
from typing import Any, Dict, Mapping, Optional

from tiktok_proxy.config.constants import SIGN_EXCLUDED_PARAMS
from tiktok_proxy.core.errors import ConfigurationError
from tiktok_proxy.core.logger import setup_logger

logger = setup_logger(__name__)


def is_scalar(value: Any) -> bool:
    """Return True for values that participate in signing (str/int/float/bool)."""
    return isinstance(value, (str, int, float, bool))


def format_param_value(value: Any) -> str:
    """Render a scalar the same way it is encoded into the query string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def serialize_body(body: Optional[Mapping[str, Any]]) -> Optional[str]:
    """
    Serialize a request body exactly as it is transmitted.

    Compact separators, insertion key order, non-ASCII kept as-is. An empty
    or missing body yields None so it is neither signed nor sent.
    """
    if not body:
        return None
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


def signable_params(raw_params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Copy of the parameter map reduced to what gets signed, sorted by key."""
    params = dict(raw_params or {})
    for key in SIGN_EXCLUDED_PARAMS:
        params.pop(key, None)

    kept = {key: value for key, value in params.items() if is_scalar(value)}
    dropped = sorted(set(params) - set(kept))
    if dropped:
        logger.debug(f"Skipping non-scalar parameters from signature: {dropped}")

    return {key: kept[key] for key in sorted(kept, key=lambda k: k.encode("utf-8"))}


def canonicalize(
    raw_params: Optional[Mapping[str, Any]],
    body: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Build the signable string for a parameter map and optional body.

    Args:
        raw_params: Query parameters as supplied by the caller
        body: JSON body, or None

    Returns:
        ``key1value1key2value2...`` followed by the compact JSON body when
        the body has at least one key
    """
    param_string = "".join(
        f"{key}{format_param_value(value)}"
        for key, value in signable_params(raw_params).items()
    )

    body_string = serialize_body(body)
    if body_string is not None:
        param_string += body_string

    return param_string


def sign(secret: str, path: str, signable_string: str) -> str:
    """
    Compute the request signature.

    Args:
        secret: App secret, used both as HMAC key and as the wrapper
        path: Upstream resource path without host or query string
        signable_string: Output of ``canonicalize``

    Returns:
        Lowercase hex HMAC-SHA256 digest

    Raises:
        ConfigurationError: If the secret is empty or the path is malformed
    """
    if not secret:
        raise ConfigurationError("App secret is required to sign requests")
    if not path or not path.startswith("/") or "?" in path:
        raise ConfigurationError(
            "Signing path must be an upstream resource path without query string",
            {"path": path},
        )

    message = f"{secret}{path}{signable_string}{secret}"
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def sign_request(
    secret: str,
    path: str,
    params: Optional[Mapping[str, Any]],
    body: Optional[Mapping[str, Any]] = None,
) -> str:
    """Canonicalize and sign in one step."""
    signature = sign(secret, path, canonicalize(params, body))
    logger.debug(f"Generated signature for {path}: {signature[:8]}...")
    return signature


def verify_signature(
    secret: str,
    path: str,
    params: Optional[Mapping[str, Any]],
    body: Optional[Mapping[str, Any]],
    signature: Optional[str],
) -> bool:
    """Constant-time check of a signature against the recomputed value."""
    if not signature:
        return False
    expected = sign_request(secret, path, params, body)
    return hmac.compare_digest(expected, signature.lower())
