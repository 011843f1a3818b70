"""Tests for request signing"""

from decimal import Decimal

import pytest

from binance_client.core.exceptions import ConfigurationError
from binance_client.models.trade import OrderCreate, OrderSide, OrderType, TimeInForce
from binance_client.security.signer import sign, sign_query


# Example from the Binance API documentation (SIGNED endpoint examples)
DOC_SECRET = "NhqPtmdSJYdKjVHjA7PZj4Mge3R5YNiP1e3UZjInClVN65XAbvqqM6A7H5fATj0j"
DOC_PAYLOAD = (
    "symbol=LTCBTC&side=BUY&type=LIMIT&timeInForce=GTC&quantity=1&price=0.1"
    "&recvWindow=5000&timestamp=1499827319559"
)
DOC_SIGNATURE = "c8db56825ae71d6d79447849e617115f4a920fa2acdcab2b053c4b2838bd6b71"


def test_sign_matches_documented_example():
    assert sign(DOC_SECRET, DOC_PAYLOAD) == DOC_SIGNATURE


def test_sign_is_deterministic():
    assert sign("secret", "timestamp=1") == sign("secret", "timestamp=1")


def test_sign_changes_with_any_payload_byte():
    base = sign(DOC_SECRET, DOC_PAYLOAD)
    variants = {
        sign(DOC_SECRET, DOC_PAYLOAD[:i] + chr(ord(c) ^ 1) + DOC_PAYLOAD[i + 1:])
        for i, c in enumerate(DOC_PAYLOAD)
    }

    assert base not in variants
    assert len(variants) == len(DOC_PAYLOAD)


def test_sign_accepts_bytes_secret():
    assert sign(DOC_SECRET.encode("utf-8"), DOC_PAYLOAD) == DOC_SIGNATURE


@pytest.mark.parametrize("secret", ["", b"", None, 12345, "\ud800"])
def test_sign_rejects_invalid_secret(secret):
    with pytest.raises(ConfigurationError):
        sign(secret, "timestamp=1")


def test_sign_query_renders_documented_request():
    order = OrderCreate(
        symbol="LTCBTC",
        side=OrderSide.BUY,
        type=OrderType.LIMIT,
        time_in_force=TimeInForce.GTC,
        quantity=Decimal("1"),
        price=Decimal("0.1"),
    )

    signed = sign_query(dict(order.to_query()), DOC_SECRET, timestamp_ms=1499827319559)

    assert signed.payload == DOC_PAYLOAD
    assert signed.signature == DOC_SIGNATURE
    assert signed.render() == f"{DOC_PAYLOAD}&signature={DOC_SIGNATURE}"


def test_sign_query_without_params():
    signed = sign_query(None, "secret", timestamp_ms=1700000000000, recv_window=3000)

    assert signed.payload == "recvWindow=3000&timestamp=1700000000000"
    assert signed.timestamp == 1700000000000
    assert signed.signature == sign("secret", signed.payload)
