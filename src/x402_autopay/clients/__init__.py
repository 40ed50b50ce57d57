"""
Client module for x402 payment-gated HTTP access.

Provides the 402-aware client, the raw request dispatcher and the
``X-PAYMENT`` header encoder.
"""

from .dispatcher import RequestDispatcher
from .headers import decode_payment_header, encode_payment_header
from .http_client import Http402Client

__all__ = ["Http402Client", "RequestDispatcher", "encode_payment_header", "decode_payment_header"]
