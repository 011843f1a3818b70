"""
Kline pagination.

A kline query covers a time range but one call returns at most ``limit``
records. ``stream_klines`` keeps asking for the rest of the range until a page
reaches the requested end, and presents all pages as one ordered stream.
"""

from typing import AsyncIterator, Awaitable, Callable, List

from binance_client.core.exceptions import ProtocolError
from binance_client.core.logger import get_logger
from binance_client.models.market import Interval, KLine, KLines

logger = get_logger(__name__)

PageFetcher = Callable[[KLines, Interval], Awaitable[List[KLine]]]


def stream_klines(fetch_page: PageFetcher, query: KLines) -> AsyncIterator[KLine]:
    """
    Lazily stream every kline of ``query``'s range.

    The query is validated here, so a bad interval fails before any request.
    Pages are only fetched as the consumer iterates; closing the iterator
    early stops further requests. Errors from ``fetch_page`` propagate as
    they happen, after whatever was already yielded.

    Args:
        fetch_page: Issues one page request
        query: First page

    Raises:
        ConfigurationError: On an unknown interval or an invalid query
    """
    interval = query.validate()
    return _stream(fetch_page, query, interval)


async def _stream(fetch_page: PageFetcher, query: KLines, interval: Interval) -> AsyncIterator[KLine]:
    page_no = 1
    while True:
        page = await fetch_page(query, interval)
        logger.debug(
            f"{query.symbol} {interval.value} page {page_no}: {len(page)} kline(s) "
            f"from {query.start_ms}"
        )

        if not page:
            return

        # A lone record cannot tell whether more data follows
        if len(page) == 1:
            yield page[0]
            return

        last = page[-1]
        if query.end_ms - last.open_time > interval.duration_ms:
            # Incomplete page: the last record opens the next page
            for kline in page[:-1]:
                yield kline
            if last.open_time <= query.start_ms:
                raise ProtocolError(
                    "Kline page does not advance past its start time",
                    details={"symbol": query.symbol, "start": query.start_ms},
                )
            query = query.advance_to(last.open_time)
            page_no += 1
            continue

        for kline in page:
            yield kline
        return
