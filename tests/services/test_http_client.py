"""Tests for the HTTP transport"""

import asyncio
from typing import List
from unittest.mock import AsyncMock

import aiohttp
import pytest

from binance_client.core.exceptions import (
    ConfigurationError,
    ConnectivityError,
    ExchangeError,
    ProtocolError,
)
from binance_client.models.market import Price
from binance_client.services.http_client import HttpClient
from binance_client.services.rate_limiter import AdmissionController, RateGate

from conftest import weight_rule


pytestmark = pytest.mark.asyncio

URL = "https://api.binance.com/api/v3/ticker/price"
PATH = "/api/v3/ticker/price"


async def test_decodes_typed_response(session):
    session.route("GET", PATH, (200, [{"symbol": "BTCUSDT", "price": "42000.10"}]))
    http = HttpClient(session=session)

    prices = await http.get(URL, List[Price])

    assert prices == [Price(symbol="BTCUSDT", price="42000.10")]
    assert session.requests[0].method == "GET"


async def test_charges_request_weight(session, clock):
    session.route("GET", PATH, (200, []))
    gate = RateGate(weight_rule(1200, "MINUTE"))
    http = HttpClient(session=session, admission=AdmissionController([gate], clock=clock))

    await http.get(URL, List[Price], weight=2)
    await http.get(URL, List[Price], weight=5)

    assert gate.total_weight == 7
    assert gate.total_requests == 2


async def test_unsatisfiable_weight_issues_no_request(session, clock):
    session.route("GET", PATH, (200, []))
    http = HttpClient(
        session=session,
        admission=AdmissionController([RateGate(weight_rule(10))], clock=clock),
    )

    with pytest.raises(ConfigurationError):
        await http.get(URL, List[Price], weight=11)

    assert session.requests == []


async def test_exchange_error_is_preserved_verbatim(session):
    session.route("GET", PATH, (400, {"code": -1121, "msg": "Invalid symbol."}))
    http = HttpClient(session=session)

    with pytest.raises(ExchangeError) as exc_info:
        await http.get(URL, List[Price])

    error = exc_info.value
    assert error.code == -1121
    assert error.message == "Invalid symbol."
    assert error.status == 400
    assert error.to_dict()["code"] == -1121


async def test_non_json_error_body(session):
    session.route("GET", PATH, (502, "<html>Bad Gateway</html>"))
    http = HttpClient(session=session)

    with pytest.raises(ExchangeError) as exc_info:
        await http.get(URL, List[Price])

    assert exc_info.value.code is None
    assert exc_info.value.status == 502
    assert "Bad Gateway" in exc_info.value.message


@pytest.mark.parametrize("body", [
    "not json at all",
    '{"symbol": "BTCUSDT"',
])
async def test_malformed_success_body_is_protocol_error(session, body):
    session.route("GET", PATH, (200, body))
    http = HttpClient(session=session)

    with pytest.raises(ProtocolError, match="not valid JSON"):
        await http.get(URL, List[Price])


async def test_success_body_not_utf8_is_protocol_error(session):
    session.route("GET", PATH, (200, b'[{"symbol": "\xff\xfe", "price": "1"}]'))
    http = HttpClient(session=session)

    with pytest.raises(ProtocolError, match="not valid JSON") as exc_info:
        await http.get(URL, List[Price])

    assert isinstance(exc_info.value.original_exception, UnicodeDecodeError)


async def test_error_body_not_utf8_is_exchange_error(session):
    session.route("GET", PATH, (503, b"Service \xff Unavailable"))
    http = HttpClient(session=session)

    with pytest.raises(ExchangeError) as exc_info:
        await http.get(URL, List[Price])

    assert exc_info.value.code is None
    assert exc_info.value.status == 503
    assert exc_info.value.message == "Service � Unavailable"


async def test_unexpected_shape_is_protocol_error(session):
    session.route("GET", PATH, (200, {"symbol": "BTCUSDT", "price": "1"}))
    http = HttpClient(session=session)

    with pytest.raises(ProtocolError, match="Unexpected response shape"):
        await http.get(URL, List[Price])


@pytest.mark.parametrize("failure", [
    aiohttp.ClientConnectionError("connection refused"),
    aiohttp.ServerDisconnectedError(),
    asyncio.TimeoutError(),
])
async def test_network_failures_are_connectivity_errors(session, failure):
    session.route("GET", PATH, failure)
    http = HttpClient(session=session)

    with pytest.raises(ConnectivityError) as exc_info:
        await http.get(URL, List[Price])

    assert exc_info.value.original_exception is failure


async def test_post_sends_form_body(session):
    session.route("POST", "/api/v3/order", (200, {"ok": True}))
    http = HttpClient(session=session)

    await http.post("https://api.binance.com/api/v3/order", dict, body="a=1&b=2")

    request = session.requests[0]
    assert request.data == "a=1&b=2"
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"


async def test_injected_session_is_not_closed(session):
    http = HttpClient(session=session)

    await http.close()

    assert session.closed is False


async def test_owned_session_is_closed(monkeypatch):
    created = AsyncMock()
    created.closed = False
    monkeypatch.setattr(aiohttp, "ClientSession", lambda **kwargs: created)
    http = HttpClient()

    await http._ensure_session()
    await http.close()

    created.close.assert_awaited_once()
