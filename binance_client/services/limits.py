"""
Rate limit discovery.

Reads the rules the exchange publishes on its exchange-info endpoint. Runs once
per client construction, before any gate exists, so the call itself is not
rate limited.
"""

from typing import Any, Dict, List

from pydantic import ValidationError

from binance_client.core.exceptions import ProtocolError
from binance_client.core.logger import get_logger
from binance_client.models.rate_limit import RateLimitDescriptor
from binance_client.services.http_client import HttpClient

logger = get_logger(__name__)


def parse_descriptors(payload: Dict[str, Any]) -> List[RateLimitDescriptor]:
    """
    Extract the rate limit rules from an exchange-info body.

    Entries that do not parse are dropped with a warning: no local gate is
    built for them and the server's own 429 answers are left to enforce them.

    Raises:
        ProtocolError: If the body has no ``rateLimits`` list at all
    """
    raw_limits = payload.get("rateLimits")
    if not isinstance(raw_limits, list):
        raise ProtocolError("Exchange info has no rateLimits list")

    descriptors = []
    for entry in raw_limits:
        try:
            descriptors.append(RateLimitDescriptor.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Ignoring unparseable rate limit {entry!r}: {e.error_count()} error(s)")

    return descriptors


async def fetch_descriptors(http: HttpClient, url: str) -> List[RateLimitDescriptor]:
    """
    Fetch the published rate limits.

    Args:
        http: Transport; must not be gated yet
        url: Absolute URL of the exchange-info endpoint

    Returns:
        One descriptor per well-formed published rule

    Raises:
        ConnectivityError / ExchangeError / ProtocolError from the transport
    """
    payload = await http.get(url, Dict[str, Any])
    descriptors = parse_descriptors(payload)

    logger.info(
        f"Fetched {len(descriptors)} rate limit(s): "
        f"{', '.join(str(d) for d in descriptors) or 'none'}"
    )
    return descriptors
