"""
HTTP transport.

Every call goes through the admission controller first, then aiohttp, then a
pydantic TypeAdapter for the expected response shape. Failures are mapped onto
the client's error taxonomy; nothing is retried here.
"""

import asyncio
import json
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union

import aiohttp
from pydantic import TypeAdapter, ValidationError

from binance_client.core.exceptions import (
    ConnectivityError,
    ExchangeError,
    ProtocolError,
    wrap_exception,
)
from binance_client.core.logger import get_logger
from binance_client.services.rate_limiter import AdmissionController

logger = get_logger(__name__)

T = TypeVar("T")

Params = Union[Mapping[str, str], Sequence[Tuple[str, str]]]


def _preview(body: bytes) -> str:
    return body[:200].decode("utf-8", errors="replace")


@lru_cache(maxsize=None)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


class HttpClient:
    """
    Rate-governed JSON client.

    Features:
    - weight-aware admission before every call
    - owned or injected aiohttp session (connection pooling)
    - typed decoding of 2xx bodies
    - error mapping: ConnectivityError / ExchangeError / ProtocolError
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        admission: Optional[AdmissionController] = None,
        timeout: float = 30.0,
    ):
        self.session = session
        self.admission = admission
        self.timeout = timeout
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self.session

    async def close(self) -> None:
        """Close the session if this client created it"""
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()
            logger.debug("HTTP session closed")

    async def execute(
        self,
        method: str,
        url: str,
        response_type: Type[T],
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Params] = None,
        body: Optional[str] = None,
        weight: int = 1,
        admission_timeout: Optional[float] = None,
    ) -> T:
        """
        Issue one request and decode its body.

        Args:
            method: HTTP method
            url: Absolute URL, possibly carrying a pre-rendered query string
            response_type: Expected shape of a 2xx body, e.g. List[Price]
            headers: Extra request headers
            params: Query parameters to append
            body: Form-encoded request body
            weight: Request weight charged against the rate gates
            admission_timeout: Optional bound on the rate limit wait

        Raises:
            ConfigurationError: If ``weight`` can never be admitted
            AdmissionTimeoutError: If ``admission_timeout`` expires
            ConnectivityError: On network failure or timeout
            ExchangeError: On a non-2xx answer
            ProtocolError: On a 2xx body that does not decode to ``response_type``
        """
        if self.admission is not None:
            await self.admission.acquire(weight, timeout=admission_timeout)

        session = await self._ensure_session()

        request_headers = dict(headers or {})
        if body is not None:
            request_headers.setdefault("Content-Type", "application/x-www-form-urlencoded")

        logger.debug(f"{method} {url} (weight={weight})")
        try:
            async with session.request(
                method,
                url,
                headers=request_headers,
                params=params,
                data=body,
            ) as response:
                status = response.status
                raw = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"{method} {url} failed: {e!r}")
            raise wrap_exception(
                e, ConnectivityError, f"{method} {url} failed: {e}", method=method, url=url
            ) from e

        if 200 <= status < 300:
            return self._decode(raw, response_type, url)

        error = self._exchange_error(status, raw)
        logger.warning(f"{method} {url} rejected: HTTP {status}, code={error.code}, msg={error.message}")
        raise error

    async def get(self, url: str, response_type: Type[T], **kwargs) -> T:
        return await self.execute("GET", url, response_type, **kwargs)

    async def post(self, url: str, response_type: Type[T], **kwargs) -> T:
        return await self.execute("POST", url, response_type, **kwargs)

    @staticmethod
    def _decode(body: bytes, response_type: Type[T], url: str) -> T:
        try:
            payload = json.loads(body)
        except ValueError as e:
            raise ProtocolError(
                f"Response from {url} is not valid JSON",
                details={"body": _preview(body)},
                original_exception=e,
            ) from e

        try:
            return _adapter(response_type).validate_python(payload)
        except ValidationError as e:
            raise ProtocolError(
                f"Unexpected response shape from {url}: {e.error_count()} error(s)",
                details={"body": _preview(body)},
                original_exception=e,
            ) from e

    @staticmethod
    def _exchange_error(status: int, body: bytes) -> ExchangeError:
        """Error payloads look like {"code": -1121, "msg": "Invalid symbol."}"""
        text = body.decode("utf-8", errors="replace")
        try:
            payload = json.loads(text)
        except ValueError:
            payload = None

        if isinstance(payload, dict) and "code" in payload and "msg" in payload:
            try:
                code = int(payload["code"])
            except (TypeError, ValueError):
                code = None
            return ExchangeError(code=code, message=str(payload["msg"]), status=status)

        return ExchangeError(code=None, message=text or f"HTTP {status}", status=status)
