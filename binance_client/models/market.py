"""
Market data models

Klines, the kline page query, and price snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from binance_client.core.exceptions import ConfigurationError


class Interval(str, Enum):
    """Kline granularities accepted by the exchange"""
    MINUTE_1 = "1m"
    MINUTE_3 = "3m"
    MINUTE_5 = "5m"
    MINUTE_15 = "15m"
    MINUTE_30 = "30m"
    HOUR_1 = "1h"
    HOUR_2 = "2h"
    HOUR_4 = "4h"
    HOUR_6 = "6h"
    HOUR_8 = "8h"
    HOUR_12 = "12h"
    DAY_1 = "1d"
    DAY_3 = "3d"
    WEEK_1 = "1w"
    MONTH_1 = "1M"

    @property
    def duration(self) -> timedelta:
        return _INTERVAL_DURATIONS[self]

    @property
    def duration_ms(self) -> int:
        return int(self.duration.total_seconds() * 1000)

    @classmethod
    def parse(cls, value: Union["Interval", str, timedelta]) -> "Interval":
        """
        Resolve an interval given as enum member, code ("5m") or duration.

        Raises:
            ConfigurationError: If the exchange has no such interval
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, timedelta):
            for interval, duration in _INTERVAL_DURATIONS.items():
                if duration == value:
                    return interval
            raise ConfigurationError(f"{value} is not a valid interval for Binance")
        try:
            return cls(value)
        except ValueError as e:
            raise ConfigurationError(
                f"{value} is not a valid interval for Binance", original_exception=e
            ) from e


# 1M is approximated as 30 days; only used for the page completeness check
_INTERVAL_DURATIONS: Dict[Interval, timedelta] = {
    Interval.MINUTE_1: timedelta(minutes=1),
    Interval.MINUTE_3: timedelta(minutes=3),
    Interval.MINUTE_5: timedelta(minutes=5),
    Interval.MINUTE_15: timedelta(minutes=15),
    Interval.MINUTE_30: timedelta(minutes=30),
    Interval.HOUR_1: timedelta(hours=1),
    Interval.HOUR_2: timedelta(hours=2),
    Interval.HOUR_4: timedelta(hours=4),
    Interval.HOUR_6: timedelta(hours=6),
    Interval.HOUR_8: timedelta(hours=8),
    Interval.HOUR_12: timedelta(hours=12),
    Interval.DAY_1: timedelta(days=1),
    Interval.DAY_3: timedelta(days=3),
    Interval.WEEK_1: timedelta(weeks=1),
    Interval.MONTH_1: timedelta(days=30),
}


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_millis(value: Union[datetime, int]) -> int:
    """Epoch milliseconds of a datetime (naive means UTC) or passthrough int"""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - _EPOCH) // timedelta(milliseconds=1)
    return int(value)


def from_millis(value: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=value)


# Positional layout of a kline row as returned by /klines
_KLINE_FIELDS = (
    "open_time",
    "open",
    "high",
    "low",
    "close",
    "volume",
    "close_time",
    "quote_asset_volume",
    "number_of_trades",
    "taker_buy_base_asset_volume",
    "taker_buy_quote_asset_volume",
)


class KLine(BaseModel):
    """
    One candlestick.

    The exchange sends klines as JSON arrays; the before-validator maps the
    array positionally onto the fields (a trailing "ignore" column is dropped).
    """

    model_config = ConfigDict(frozen=True)

    open_time: int = Field(..., description="Open time, epoch ms")
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal
    close_time: int = Field(..., description="Close time, epoch ms")
    quote_asset_volume: Decimal
    number_of_trades: int
    taker_buy_base_asset_volume: Decimal
    taker_buy_quote_asset_volume: Decimal

    @model_validator(mode="before")
    @classmethod
    def from_row(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) < len(_KLINE_FIELDS):
                raise ValueError(
                    f"kline row has {len(data)} columns, expected at least {len(_KLINE_FIELDS)}"
                )
            return dict(zip(_KLINE_FIELDS, data))
        return data

    @property
    def open_dt(self) -> datetime:
        return from_millis(self.open_time)


@dataclass(frozen=True)
class KLines:
    """
    Query for one page of klines.

    Continuation pages are derived with ``advance_to`` rather than mutated.
    """

    symbol: str
    interval: Union[Interval, str, timedelta]
    start_time: datetime
    end_time: datetime
    limit: int = 500

    @property
    def start_ms(self) -> int:
        return to_millis(self.start_time)

    @property
    def end_ms(self) -> int:
        return to_millis(self.end_time)

    def advance_to(self, open_time_ms: int) -> "KLines":
        """Same query, starting at the given open time"""
        return replace(
            self,
            start_time=from_millis(open_time_ms),
        )

    def validate(self) -> Interval:
        """
        Check the query can be issued and resolve its interval.

        Raises:
            ConfigurationError: On an unknown interval, a bad limit or an inverted range
        """
        interval = Interval.parse(self.interval)
        if self.limit < 1 or self.limit > 1000:
            raise ConfigurationError(f"limit must be between 1 and 1000, got {self.limit}")
        if self.start_ms > self.end_ms:
            raise ConfigurationError(
                "start_time is after end_time",
                details={"start_time": self.start_time, "end_time": self.end_time},
            )
        return interval

    def to_params(self, interval: Interval) -> Dict[str, str]:
        return {
            "symbol": self.symbol,
            "interval": interval.value,
            "startTime": str(self.start_ms),
            "endTime": str(self.end_ms),
            "limit": str(self.limit),
        }


class Price(BaseModel):
    """Latest price of a symbol"""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., description="Symbol, e.g. BTCUSDT")
    price: Decimal = Field(...)
