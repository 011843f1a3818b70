"""
Binance REST client.

Construction discovers the exchange's published rate limits and wires an
admission controller into the transport; every business call afterwards is
weighted against those limits.

Usage:
    async with await BinanceClient.create(config) as client:
        prices = await client.get_prices()
        async for kline in client.get_klines(query):
            ...
"""

from typing import AsyncIterator, Dict, List, Mapping, Optional, Any

import aiohttp

from binance_client.core.clock import Clock
from binance_client.core.config import BinanceConfig, get_config
from binance_client.core.exceptions import ConfigurationError
from binance_client.core.logger import get_logger
from binance_client.models.account import AccountBalances, Balance
from binance_client.models.market import Interval, KLine, KLines, Price
from binance_client.models.trade import CreateOrderResponse, OrderCreate
from binance_client.security.signer import SignedQuery, sign_query
from binance_client.services.decorators import log_api_call
from binance_client.services.http_client import HttpClient
from binance_client.services.limits import fetch_descriptors
from binance_client.services.paginator import stream_klines
from binance_client.services.rate_limiter import AdmissionController

logger = get_logger(__name__)

API_KEY_HEADER = "X-MBX-APIKEY"

# Request weights as documented by the exchange
PRICES_WEIGHT = 2
ACCOUNT_WEIGHT = 5
ORDER_WEIGHT = 1
KLINES_WEIGHT = 1


class BinanceClient:
    """
    Rate-governed client for the Binance spot REST API.

    Create instances with ``BinanceClient.create``; each instance owns its own
    rate gates, so two clients never share admission state.
    """

    def __init__(self, config: BinanceConfig, http: HttpClient, clock: Clock):
        self.config = config
        self._http = http
        self._clock = clock

    @classmethod
    async def create(
        cls,
        config: Optional[BinanceConfig] = None,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        clock: Optional[Clock] = None,
    ) -> "BinanceClient":
        """
        Fetch the published rate limits and build a ready client.

        Args:
            config: Connection settings, defaults to the environment's
            session: aiohttp session to use instead of an owned one
            clock: Time source, injectable for tests

        Raises:
            ConnectivityError / ExchangeError / ProtocolError: If the limits
                cannot be fetched. No client is returned in that case.
        """
        config = config or get_config().get_binance_config()
        clock = clock or Clock()
        http = HttpClient(session=session, timeout=config.request_timeout)

        try:
            descriptors = await fetch_descriptors(http, config.base_url + config.info_url)
        except Exception:
            await http.close()
            raise

        http.admission = AdmissionController.from_descriptors(descriptors, clock=clock)
        logger.info(f"BinanceClient ready for {config.base_url}")
        return cls(config, http, clock)

    @property
    def admission(self) -> Optional[AdmissionController]:
        return self._http.admission

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> "BinanceClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _url(self, path: str) -> str:
        return self.config.base_url + path

    def _sign(self, params: Optional[Mapping[str, Any]] = None) -> SignedQuery:
        """Sign ``params`` with a timestamp taken now, before any rate limit wait"""
        if not self.config.api_key:
            raise ConfigurationError("Binance API key not configured")
        return sign_query(
            params,
            self.config.api_secret,
            timestamp_ms=self._clock.time_ms(),
            recv_window=self.config.recv_window,
        )

    def _auth_headers(self) -> Dict[str, str]:
        return {API_KEY_HEADER: self.config.api_key}

    # ==================== Market data ====================

    @log_api_call
    async def get_prices(self) -> List[Price]:
        """
        Snapshot of the latest price of every symbol.

        Returns:
            One Price per symbol
        """
        return await self._http.get(
            self._url("/api/v3/ticker/price"),
            List[Price],
            weight=PRICES_WEIGHT,
        )

    def get_klines(self, query: KLines) -> AsyncIterator[KLine]:
        """
        Stream the klines of ``query``'s time range.

        The endpoint is called again, lazily, for as long as the pages do
        not reach the requested end time.

        Raises:
            ConfigurationError: Immediately, on an invalid interval or query
        """
        return stream_klines(self._fetch_kline_page, query)

    async def _fetch_kline_page(self, query: KLines, interval: Interval) -> List[KLine]:
        return await self._http.get(
            self._url("/api/v1/klines"),
            List[KLine],
            params=query.to_params(interval),
            weight=KLINES_WEIGHT,
        )

    # ==================== Account ====================

    @log_api_call
    async def get_balance(self) -> Dict[str, Balance]:
        """
        Current balance of every asset.

        Returns:
            Free and locked amounts keyed by asset, e.g. {"BTC": Balance(...)}
        """
        signed = self._sign()
        account = await self._http.get(
            f"{self._url('/api/v3/account')}?{signed.render()}",
            AccountBalances,
            headers=self._auth_headers(),
            weight=ACCOUNT_WEIGHT,
        )
        return account.by_asset()

    # ==================== Orders ====================

    @log_api_call
    async def create_order(self, order: OrderCreate) -> str:
        """
        Place an order.

        Args:
            order: Order parameters

        Returns:
            Id of the created order
        """
        signed = self._sign(dict(order.to_query()))
        response = await self._http.post(
            self._url("/api/v3/order"),
            CreateOrderResponse,
            headers=self._auth_headers(),
            body=signed.render(),
            weight=ORDER_WEIGHT,
        )
        logger.info(f"Order {response.order_id} created: {order.side.value} {order.quantity} {order.symbol}")
        return str(response.order_id)
