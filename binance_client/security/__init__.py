"""Request signing."""

from binance_client.security.signer import SignedQuery, sign, sign_query

__all__ = ["SignedQuery", "sign", "sign_query"]
