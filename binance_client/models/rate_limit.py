"""
Rate limit models

Rules as published by the exchange-info endpoint, e.g.
{"rateLimitType": "REQUEST_WEIGHT", "interval": "MINUTE", "intervalNum": 1, "limit": 1200}
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RateLimitType(str, Enum):
    """What a rule counts"""
    REQUEST_WEIGHT = "REQUEST_WEIGHT"
    ORDERS = "ORDERS"
    RAW_REQUESTS = "RAW_REQUESTS"


class RateLimitInterval(str, Enum):
    """Unit of a rule's window"""
    SECOND = "SECOND"
    MINUTE = "MINUTE"
    DAY = "DAY"

    @property
    def seconds(self) -> int:
        return _INTERVAL_SECONDS[self]


_INTERVAL_SECONDS = {
    RateLimitInterval.SECOND: 1,
    RateLimitInterval.MINUTE: 60,
    RateLimitInterval.DAY: 86400,
}


class RateLimitDescriptor(BaseModel):
    """One published rate limit rule. Immutable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    kind: RateLimitType = Field(..., alias="rateLimitType")
    interval: RateLimitInterval = Field(...)
    interval_num: int = Field(..., alias="intervalNum", gt=0)
    limit: int = Field(..., gt=0, description="Capacity within one window")

    @property
    def period(self) -> float:
        """Window length in seconds"""
        return float(self.interval.seconds * self.interval_num)

    def __str__(self) -> str:
        return f"{self.kind.value} {self.limit}/{self.interval_num} {self.interval.value}"
