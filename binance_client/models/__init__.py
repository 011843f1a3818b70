"""
Data models

Pydantic models for the exchange's requests and responses.
"""

from .account import (
    AccountBalances,
    AssetBalance,
    Balance,
)

from .market import (
    Interval,
    KLine,
    KLines,
    Price,
)

from .rate_limit import (
    RateLimitDescriptor,
    RateLimitInterval,
    RateLimitType,
)

from .trade import (
    CreateOrderResponse,
    OrderCreate,
    OrderCreateResponseType,
    OrderSide,
    OrderType,
    TimeInForce,
)

__all__ = [
    "AccountBalances",
    "AssetBalance",
    "Balance",
    "Interval",
    "KLine",
    "KLines",
    "Price",
    "RateLimitDescriptor",
    "RateLimitInterval",
    "RateLimitType",
    "CreateOrderResponse",
    "OrderCreate",
    "OrderCreateResponseType",
    "OrderSide",
    "OrderType",
    "TimeInForce",
]
