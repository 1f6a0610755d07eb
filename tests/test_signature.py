import hashlib
import hmac
import itertools

import pytest

from tiktok_proxy.core.errors import ConfigurationError
from tiktok_proxy.core.signature import (
    canonicalize,
    serialize_body,
    sign,
    sign_request,
    verify_signature,
)

PATH = "/order/202309/orders/search"
PARAMS = {"app_key": "abc", "timestamp": 1700000000, "shop_cipher": "xyz"}
BODY = {"order_status": "UNPAID"}


def test_golden_vector_signable_string():
    assert canonicalize(PARAMS, BODY) == (
        'app_keyabcshop_cipherxyztimestamp1700000000{"order_status":"UNPAID"}'
    )


def test_golden_vector_matches_independent_hmac():
    message = (
        "s3cr3t"
        "/order/202309/orders/search"
        "app_keyabcshop_cipherxyztimestamp1700000000"
        '{"order_status":"UNPAID"}'
        "s3cr3t"
    )
    expected = hmac.new(b"s3cr3t", message.encode("utf-8"), hashlib.sha256).hexdigest()

    assert sign_request("s3cr3t", PATH, PARAMS, BODY) == expected
    assert sign("s3cr3t", PATH, canonicalize(PARAMS, BODY)) == expected


def test_signature_is_lowercase_hex():
    signature = sign_request("s3cr3t", PATH, PARAMS, BODY)
    assert len(signature) == 64
    assert signature == signature.lower()
    int(signature, 16)


def test_sign_is_deterministic():
    first = sign_request("s3cr3t", PATH, PARAMS, BODY)
    second = sign_request("s3cr3t", PATH, dict(PARAMS), dict(BODY))
    assert first == second


def test_signature_changes_with_secret_path_and_params():
    base = sign_request("s3cr3t", PATH, PARAMS, BODY)
    assert sign_request("other", PATH, PARAMS, BODY) != base
    assert sign_request("s3cr3t", "/order/202309/orders", PARAMS, BODY) != base
    assert sign_request("s3cr3t", PATH, {**PARAMS, "timestamp": 1700000001}, BODY) != base


@pytest.mark.parametrize(
    "extra",
    [{"sign": "deadbeef"}, {"access_token": "tok"}, {"sign": "x", "access_token": "y"}],
)
def test_sign_and_access_token_are_excluded(extra):
    assert canonicalize({**PARAMS, **extra}, BODY) == canonicalize(PARAMS, BODY)


def test_caller_map_is_not_mutated():
    params = {**PARAMS, "sign": "deadbeef", "access_token": "tok"}
    canonicalize(params, BODY)
    assert params["sign"] == "deadbeef"
    assert params["access_token"] == "tok"


def test_order_independent_of_insertion_order():
    items = list(PARAMS.items()) + [("page_size", 20)]
    outputs = {canonicalize(dict(perm)) for perm in itertools.permutations(items)}
    assert outputs == {"app_keyabcpage_size20shop_cipherxyztimestamp1700000000"}


def test_keys_sorted_bytewise():
    # Uppercase sorts before lowercase, underscore between them
    assert canonicalize({"b": 1, "B": 2, "a_b": 3, "ab": 4}) == "B2a_b3ab4b1"


def test_empty_body_equals_no_body():
    assert canonicalize(PARAMS, {}) == canonicalize(PARAMS, None)
    assert sign_request("s3cr3t", PATH, PARAMS, {}) == sign_request("s3cr3t", PATH, PARAMS, None)


@pytest.mark.parametrize("nested", [{"a": 1}, [1, 2], ["x"], {}])
def test_structured_values_are_excluded(nested):
    assert canonicalize({**PARAMS, "filters": nested}) == canonicalize(PARAMS)


def test_none_values_are_excluded():
    assert canonicalize({**PARAMS, "page_token": None}) == canonicalize(PARAMS)


def test_bool_values_render_like_query_string():
    assert canonicalize({"flag": True, "other": False}) == "flagtrueotherfalse"


def test_body_serialization_is_compact_and_keeps_key_order():
    body = {"z": 1, "a": {"nested": "ü"}}
    assert serialize_body(body) == '{"z":1,"a":{"nested":"ü"}}'
    assert canonicalize({}, body) == '{"z":1,"a":{"nested":"ü"}}'


def test_missing_secret_is_configuration_error():
    with pytest.raises(ConfigurationError):
        sign("", PATH, "anything")
    with pytest.raises(ConfigurationError):
        sign_request(None, PATH, PARAMS)


@pytest.mark.parametrize("path", ["", "order/202309/orders", "/order/202309/orders?x=1"])
def test_malformed_path_is_configuration_error(path):
    with pytest.raises(ConfigurationError):
        sign("s3cr3t", path, "")


def test_verify_signature():
    signature = sign_request("s3cr3t", PATH, PARAMS, BODY)
    assert verify_signature("s3cr3t", PATH, PARAMS, BODY, signature)
    assert verify_signature("s3cr3t", PATH, PARAMS, BODY, signature.upper())
    assert not verify_signature("s3cr3t", PATH, PARAMS, {"order_status": "PAID"}, signature)
    assert not verify_signature("s3cr3t", PATH, PARAMS, BODY, None)
