"""
Exception and Error Definitions Module

Defines the exception hierarchy for the x402 payment flow. Every failure that
aborts a logical request item maps onto exactly one class below; non-402 HTTP
statuses are never errors and pass through to the caller untouched.

Exception Hierarchy:
    X402Error (root)
    ├── ConfigurationError
    ├── TransportError
    ├── ProtocolError
    │   └── NoOfferError
    ├── UnsupportedNetworkError
    │   └── NetworkMismatchError
    ├── SpendCapExceededError
    └── SigningError
"""

from decimal import Decimal
from typing import List, Optional, Sequence


class X402Error(Exception):
    """
    Root exception class for all project-specific exceptions.

    All custom exceptions inherit from this class so batch callers can
    capture any payment-flow failure with a single ``except`` clause.
    """
    pass


class ConfigurationError(X402Error):
    """
    Raised when configuration or credential material is missing or invalid.

    This includes scenarios such as:
    - Missing wallet seed
    - Wallet seed that is not valid base64
    - Configured wallet address that does not match the derived account
    - Negative or non-numeric spend cap
    """
    pass


class TransportError(X402Error):
    """
    Raised when an HTTP request cannot be completed at the transport level.

    DNS failures, refused connections and timeouts end up here. An HTTP
    response with any status code is never a transport error.

    Attributes:
        method: HTTP method of the failed request
        url: Target URL of the failed request
    """

    def __init__(self, message: str, *, method: Optional[str] = None, url: Optional[str] = None):
        super().__init__(message)
        self.method = method
        self.url = url


class ProtocolError(X402Error):
    """
    Raised when a 402 response body violates the x402 challenge schema.

    This includes scenarios such as:
    - Empty or missing body
    - Body that is not JSON or not a JSON object
    - ``accepts`` field absent or not a list
    - An offer missing required fields
    """
    pass


class NoOfferError(ProtocolError):
    """
    Raised when a well-formed challenge carries an empty ``accepts`` list.
    """
    pass


class UnsupportedNetworkError(X402Error):
    """
    Raised when a network alias is not present in the network registry.

    Attributes:
        network: The alias that failed to resolve
        supported: Every alias the registry accepts, sorted
    """

    def __init__(self, network: str, supported: Sequence[str], message: Optional[str] = None):
        self.network = network
        self.supported: List[str] = list(supported)
        super().__init__(
            message
            or f'Network "{network}" is not supported. Supported networks: {", ".join(self.supported)}'
        )


class NetworkMismatchError(UnsupportedNetworkError):
    """
    Raised when the selected offer targets a different chain than the one
    pre-selected by the caller.
    """

    def __init__(self, network: str, expected: str, supported: Sequence[str]):
        self.expected = expected
        super().__init__(
            network,
            supported,
            message=f'Offer network "{network}" does not match the selected network "{expected}"',
        )


class SpendCapExceededError(X402Error):
    """
    Raised when an offer costs more than the caller's USD spend cap.

    Always raised before any signing is attempted.

    Attributes:
        required_usd: USD-equivalent cost of the offer
        cap_usd: Configured maximum
    """

    def __init__(self, required_usd: Decimal, cap_usd: Decimal):
        self.required_usd = required_usd
        self.cap_usd = cap_usd
        super().__init__(
            f"Payment required (${required_usd:.6f}) exceeds maximum allowed (${cap_usd})"
        )


class SigningError(X402Error):
    """
    Raised when a payment authorization cannot be built or signed.

    This includes scenarios such as:
    - Invalid recipient or asset address in the offer
    - Signing capability raising an exception
    - Computed deadline not in the future
    """
    pass
