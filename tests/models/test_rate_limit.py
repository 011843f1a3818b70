"""Tests for rate limit descriptors"""

import pytest
from pydantic import ValidationError

from binance_client.models.rate_limit import (
    RateLimitDescriptor,
    RateLimitInterval,
    RateLimitType,
)


def test_rate_limit_descriptor_from_exchange_info():
    descriptor = RateLimitDescriptor.model_validate(
        {"rateLimitType": "REQUEST_WEIGHT", "interval": "MINUTE", "intervalNum": 1, "limit": 1200}
    )

    assert descriptor.kind is RateLimitType.REQUEST_WEIGHT
    assert descriptor.interval is RateLimitInterval.MINUTE
    assert descriptor.period == 60.0
    assert str(descriptor) == "REQUEST_WEIGHT 1200/1 MINUTE"


def test_rate_limit_descriptor_period():
    descriptor = RateLimitDescriptor(kind="ORDERS", interval="SECOND", interval_num=10, limit=50)
    assert descriptor.period == 10.0

    day = RateLimitDescriptor(kind="ORDERS", interval="DAY", interval_num=1, limit=160000)
    assert day.period == 86400.0


def test_rate_limit_descriptor_is_immutable():
    descriptor = RateLimitDescriptor(kind="REQUEST_WEIGHT", interval="MINUTE", interval_num=1, limit=1200)
    with pytest.raises(ValidationError):
        descriptor.limit = 10


@pytest.mark.parametrize("entry", [
    {"rateLimitType": "REQUEST_WEIGHT", "interval": "HOUR", "intervalNum": 1, "limit": 10},
    {"rateLimitType": "REQUEST_WEIGHT", "interval": "MINUTE", "intervalNum": 0, "limit": 10},
    {"rateLimitType": "REQUEST_WEIGHT", "interval": "MINUTE", "intervalNum": 1, "limit": -1},
    {"rateLimitType": "CONNECTIONS", "interval": "MINUTE", "intervalNum": 1, "limit": 10},
    {"interval": "MINUTE", "intervalNum": 1, "limit": 10},
])
def test_rate_limit_descriptor_rejects_malformed(entry):
    with pytest.raises(ValidationError):
        RateLimitDescriptor.model_validate(entry)
