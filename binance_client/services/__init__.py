"""
Services module - exchange access.

Contains:
- Rate limiting: per-rule gates and all-or-nothing admission
- HTTP transport: admission, dispatch, decoding, error mapping
- Rate limit discovery
- Kline pagination
- Decorators: caller-side retry/timeout, call logging
"""

from binance_client.services.rate_limiter import Admission, AdmissionController, RateGate
from binance_client.services.http_client import HttpClient
from binance_client.services.limits import fetch_descriptors, parse_descriptors
from binance_client.services.paginator import stream_klines
from binance_client.services.decorators import log_api_call, with_retry, with_timeout

__all__ = [
    # Rate limiting
    'Admission',
    'AdmissionController',
    'RateGate',

    # Transport
    'HttpClient',

    # Discovery
    'fetch_descriptors',
    'parse_descriptors',

    # Pagination
    'stream_klines',

    # Decorators
    'log_api_call',
    'with_retry',
    'with_timeout',
]
