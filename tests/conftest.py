"""Shared fixtures: a virtual clock and a scripted aiohttp session."""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlsplit

import pytest

from binance_client.core.clock import Clock
from binance_client.core.logger import JsonFormatter, PlainFormatter
from binance_client.models.rate_limit import RateLimitDescriptor


BASE_WALL_MS = 1_700_000_000_000


class FakeClock(Clock):
    """Virtual time: sleep advances the clock instead of waiting"""

    def __init__(self, start: float = 1000.0, wall_ms: int = BASE_WALL_MS):
        self.start = start
        self.now = start
        self.wall_ms = wall_ms
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self.now

    def time_ms(self) -> int:
        return self.wall_ms + int(round((self.now - self.start) * 1000))

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


class StuckClock(FakeClock):
    """Time never moves: sleeping blocks until cancelled"""

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        await asyncio.Event().wait()


class FakeResponse:
    def __init__(self, status: int, body: bytes):
        self.status = status
        self._body = body

    async def read(self) -> bytes:
        return self._body

    async def text(self) -> str:
        return self._body.decode("utf-8")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: Dict[str, str]
    params: Any
    data: Optional[str]

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    @property
    def query(self) -> Dict[str, str]:
        pairs = parse_qsl(urlsplit(self.url).query)
        if self.params:
            items = self.params.items() if isinstance(self.params, dict) else self.params
            pairs.extend(items)
        return dict(pairs)


Handler = Callable[[RecordedRequest], Any]


@dataclass
class FakeSession:
    """
    Stands in for aiohttp.ClientSession.

    Routes map (method, path) to either a (status, body) tuple, an exception
    to raise, or a callable receiving the RecordedRequest and returning one
    of those. Bodies that are neither str nor bytes are JSON encoded.
    """

    routes: Dict[Tuple[str, str], Any] = field(default_factory=dict)
    requests: List[RecordedRequest] = field(default_factory=list)
    closed: bool = False

    def route(self, method: str, path: str, result: Any) -> None:
        self.routes[(method, path)] = result

    def request(self, method, url, headers=None, params=None, data=None):
        recorded = RecordedRequest(method, url, dict(headers or {}), params, data)
        self.requests.append(recorded)

        result = self.routes.get((method, recorded.path))
        if result is None:
            return FakeResponse(404, json.dumps({"code": -1, "msg": "no route"}).encode("utf-8"))
        if callable(result) and not isinstance(result, type):
            result = result(recorded)
        if isinstance(result, BaseException):
            raise result

        status, body = result
        if isinstance(body, str):
            body = body.encode("utf-8")
        elif not isinstance(body, bytes):
            body = json.dumps(body).encode("utf-8")
        return FakeResponse(status, body)

    def calls(self, path: str) -> List[RecordedRequest]:
        return [r for r in self.requests if r.path == path]

    async def close(self) -> None:
        self.closed = True


EXCHANGE_INFO = {
    "timezone": "UTC",
    "serverTime": BASE_WALL_MS,
    "rateLimits": [
        {"rateLimitType": "REQUEST_WEIGHT", "interval": "MINUTE", "intervalNum": 1, "limit": 1200},
        {"rateLimitType": "ORDERS", "interval": "SECOND", "intervalNum": 10, "limit": 50},
        {"rateLimitType": "ORDERS", "interval": "DAY", "intervalNum": 1, "limit": 160000},
        {"rateLimitType": "RAW_REQUESTS", "interval": "MINUTE", "intervalNum": 5, "limit": 6100},
    ],
    "symbols": [],
}


def weight_rule(limit: int, interval: str = "SECOND", interval_num: int = 1) -> RateLimitDescriptor:
    return RateLimitDescriptor(
        kind="REQUEST_WEIGHT", interval=interval, interval_num=interval_num, limit=limit
    )


def kline_row(open_time: int, close: str = "100.0", interval_ms: int = 60_000) -> list:
    return [
        open_time,
        "99.0",
        "101.0",
        "98.5",
        close,
        "12.5",
        open_time + interval_ms - 1,
        "1250.0",
        42,
        "6.0",
        "600.0",
        "0",
    ]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def reset_logging():
    """Drop the handlers installed by setup_logging and restore the root level"""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, (PlainFormatter, JsonFormatter)):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
