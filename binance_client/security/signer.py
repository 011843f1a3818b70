"""
Request signing for Binance private endpoints.

Binance authenticates SIGNED endpoints with a lowercase hex HMAC-SHA256 of
the exact query string (or form body) sent, keyed by the API secret.
"""

import hashlib
import hmac
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlencode

from binance_client.core.exceptions import ConfigurationError


def sign(secret: Union[str, bytes], payload: str) -> str:
    """
    Compute the signature of a canonical payload.

    Args:
        secret: API secret
        payload: Canonical query string, e.g. "recvWindow=5000&timestamp=1"

    Returns:
        Lowercase hex digest

    Raises:
        ConfigurationError: If the secret is empty or not encodable
    """
    if isinstance(secret, str):
        try:
            key = secret.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ConfigurationError(
                "API secret is not valid UTF-8", original_exception=e
            ) from e
    elif isinstance(secret, bytes):
        key = secret
    else:
        raise ConfigurationError(
            f"API secret must be str or bytes, got {type(secret).__name__}"
        )

    if not key:
        raise ConfigurationError("API secret is empty")

    return hmac.new(key, payload.encode("utf-8"), hashlib.sha256).hexdigest()


@dataclass(frozen=True)
class SignedQuery:
    """A signed parameter set, ready to be sent as query string or form body"""

    payload: str
    recv_window: int
    timestamp: int
    signature: str

    def render(self) -> str:
        return f"{self.payload}&signature={self.signature}"


def sign_query(
    params: Optional[Mapping[str, Any]],
    secret: Union[str, bytes],
    timestamp_ms: int,
    recv_window: int = 5000,
) -> SignedQuery:
    """
    Build and sign the canonical query for a SIGNED endpoint.

    Parameters keep their insertion order; recvWindow and timestamp are
    appended last, which is the form the exchange verifies against.

    Args:
        params: Business parameters (may be empty)
        secret: API secret
        timestamp_ms: Wall-clock time of construction, epoch milliseconds
        recv_window: Validity window in milliseconds
    """
    parts = []
    if params:
        parts.append(urlencode(list(params.items())))
    parts.append(f"recvWindow={recv_window}&timestamp={timestamp_ms}")
    payload = "&".join(parts)

    return SignedQuery(
        payload=payload,
        recv_window=recv_window,
        timestamp=timestamp_ms,
        signature=sign(secret, payload),
    )
