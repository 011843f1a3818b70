"""
binance_client - rate-governed, auto-paginating Binance REST client.
"""

from binance_client.client import BinanceClient
from binance_client.core.config import BinanceConfig, Config, get_config
from binance_client.core.exceptions import (
    AdmissionTimeoutError,
    BinanceClientError,
    ConfigurationError,
    ConnectivityError,
    ExchangeError,
    ProtocolError,
)

__version__ = "0.1.0"

__all__ = [
    "BinanceClient",
    "BinanceConfig",
    "Config",
    "get_config",
    "AdmissionTimeoutError",
    "BinanceClientError",
    "ConfigurationError",
    "ConnectivityError",
    "ExchangeError",
    "ProtocolError",
]
