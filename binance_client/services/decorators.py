"""
Decorators for exchange API calls.

The transport never retries on its own. These decorators let calling code opt
into a retry/timeout policy per call, and give the client uniform call logging.
"""

import asyncio
import functools
import time
from typing import Any, Callable

from binance_client.core.exceptions import ConnectivityError
from binance_client.core.logger import get_logger

logger = get_logger(__name__)


def with_retry(
    max_retries: int = 3,
    backoff_factor: float = 1.0,
    exceptions: tuple = (ConnectivityError,),
    sleep: Callable[[float], Any] = asyncio.sleep,
):
    """
    Retry decorator with exponential backoff.

    Only connectivity failures are retried by default: exchange rejections,
    protocol and configuration errors would fail the same way again.

    Args:
        max_retries: Retries after the first attempt
        backoff_factor: Wait before retry n is backoff_factor * 2**n seconds
        exceptions: Exception types that trigger a retry
        sleep: Awaitable sleep function

    Example:
        @with_retry(max_retries=3)
        async def fetch_prices():
            return await client.get_prices()
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)

                except exceptions as e:
                    if attempt >= max_retries:
                        logger.error(
                            f"{func.__name__} failed after {max_retries + 1} attempts: {e}"
                        )
                        raise

                    wait_time = backoff_factor * (2 ** attempt)
                    logger.warning(
                        f"{func.__name__} failed (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{e}. Retrying in {wait_time}s..."
                    )
                    await sleep(wait_time)

        return wrapper
    return decorator


def with_timeout(seconds: float):
    """
    Timeout decorator.

    Args:
        seconds: Timeout in seconds

    Example:
        @with_timeout(5.0)
        async def fetch_balance():
            return await client.get_balance()
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            try:
                return await asyncio.wait_for(
                    func(*args, **kwargs),
                    timeout=seconds
                )
            except asyncio.TimeoutError as e:
                logger.error(f"{func.__name__} timed out after {seconds}s")
                raise ConnectivityError(
                    f"Operation timed out after {seconds}s", original_exception=e
                ) from e

        return wrapper
    return decorator


def log_api_call(func: Callable) -> Callable:
    """
    Log the duration and outcome of an API call.

    Example:
        @log_api_call
        async def get_prices(self):
            ...
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Any:
        start_time = time.monotonic()

        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            duration = time.monotonic() - start_time
            logger.error(
                f"API call: {func.__name__} failed after {duration:.2f}s: "
                f"{type(e).__name__}: {e}"
            )
            raise

        duration = time.monotonic() - start_time
        logger.debug(f"API call: {func.__name__} completed in {duration:.2f}s")
        return result

    return wrapper
