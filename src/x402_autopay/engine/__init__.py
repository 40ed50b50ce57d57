from .exceptions import (
    X402Error,
    ConfigurationError,
    TransportError,
    ProtocolError,
    NoOfferError,
    UnsupportedNetworkError,
    NetworkMismatchError,
    SpendCapExceededError,
    SigningError,
)

__all__ = [
    "X402Error",
    "ConfigurationError",
    "TransportError",
    "ProtocolError",
    "NoOfferError",
    "UnsupportedNetworkError",
    "NetworkMismatchError",
    "SpendCapExceededError",
    "SigningError",
]
