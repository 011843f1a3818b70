"""
Custom Exceptions Module

Defines the error taxonomy surfaced by the client.
All exceptions inherit from BinanceClientError base class, so calling code
can decide its retry policy per kind:

- ConfigurationError: invalid interval, secret or unsatisfiable weight. Fatal.
- ConnectivityError: transport-level failure. Caller may retry with backoff.
- ExchangeError: the exchange rejected the request. Surfaced verbatim.
- ProtocolError: the response shape is not understood. Fatal to that call.
"""

from typing import Optional, Dict, Any


class BinanceClientError(Exception):
    """
    Base exception for all client errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize exception.

        Args:
            message: Error message
            details: Additional context information
            original_exception: Original exception if wrapping another error
        """
        self.message = message
        self.details = details or {}
        self.original_exception = original_exception

        # Construct full message
        full_message = message
        if details:
            details_str = ", ".join(f"{k}={v}" for k, v in details.items())
            full_message = f"{message} ({details_str})"

        super().__init__(full_message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(BinanceClientError):
    """Configuration is invalid, or a request can never be satisfied"""
    pass


# ============================================================================
# Transport Errors
# ============================================================================

class ConnectivityError(BinanceClientError):
    """Network-level failure while talking to the exchange"""
    pass


class AdmissionTimeoutError(BinanceClientError):
    """A caller-supplied deadline expired while waiting for rate limit capacity"""
    pass


# ============================================================================
# Response Errors
# ============================================================================

class ExchangeError(BinanceClientError):
    """
    The exchange answered with a non-2xx status.

    ``code`` and ``message`` are the exchange's own error payload, kept
    verbatim. ``code`` is None when the body carried no error payload.
    """

    def __init__(
        self,
        code: Optional[int],
        message: str,
        status: Optional[int] = None,
        original_exception: Optional[Exception] = None
    ):
        self.code = code
        self.status = status
        super().__init__(
            message,
            details={"code": code, "status": status},
            original_exception=original_exception
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["code"] = self.code
        data["status"] = self.status
        return data


class ProtocolError(BinanceClientError):
    """A 2xx response body did not match the expected shape"""
    pass


# ============================================================================
# Utility Functions
# ============================================================================

def wrap_exception(
    original_exception: Exception,
    custom_exception_class: type,
    message: Optional[str] = None,
    **details
) -> BinanceClientError:
    """
    Wrap an exception in a custom exception class.

    Args:
        original_exception: The original exception
        custom_exception_class: The custom exception class to wrap with
        message: Optional custom message
        **details: Additional details

    Returns:
        Custom exception instance

    Example:
        try:
            await session.request("GET", url)
        except aiohttp.ClientError as e:
            raise wrap_exception(
                e,
                ConnectivityError,
                "Request failed",
                url=url
            )
    """
    error_message = message or str(original_exception)

    return custom_exception_class(
        message=error_message,
        details=details,
        original_exception=original_exception
    )
