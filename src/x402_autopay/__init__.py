"""x402 autopay: automatic payment handling for HTTP 402 challenges."""

from .adapters import (
    DEFAULT_NETWORK_REGISTRY,
    LocalAccountSigner,
    NetworkDescriptor,
    NetworkRegistry,
    PaymentAuthorization,
    TypedDataSigner,
    derive_account,
    sign_payment_authorization,
)
from .clients import Http402Client, RequestDispatcher, decode_payment_header, encode_payment_header
from .config import ClientSettings, WalletCredential, load_settings
from .engine import (
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
from .engine.challenges import parse_challenge, select_offer
from .engine.guards import SpendGuard, format_usd
from .engine.reporter import ErrorRecord, classify_error
from .schemas import (
    PAYMENT_HEADER,
    PaymentChallenge,
    PaymentHeader,
    PaymentOffer,
    PaymentReceipt,
    PaymentResult,
    RequestContext,
    RequestOptions,
)
from .utils import logger, setup_logger

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_NETWORK_REGISTRY",
    "LocalAccountSigner",
    "NetworkDescriptor",
    "NetworkRegistry",
    "PaymentAuthorization",
    "TypedDataSigner",
    "derive_account",
    "sign_payment_authorization",
    "Http402Client",
    "RequestDispatcher",
    "decode_payment_header",
    "encode_payment_header",
    "ClientSettings",
    "WalletCredential",
    "load_settings",
    "X402Error",
    "ConfigurationError",
    "TransportError",
    "ProtocolError",
    "NoOfferError",
    "UnsupportedNetworkError",
    "NetworkMismatchError",
    "SpendCapExceededError",
    "SigningError",
    "parse_challenge",
    "select_offer",
    "SpendGuard",
    "format_usd",
    "ErrorRecord",
    "classify_error",
    "PAYMENT_HEADER",
    "PaymentChallenge",
    "PaymentHeader",
    "PaymentOffer",
    "PaymentReceipt",
    "PaymentResult",
    "RequestContext",
    "RequestOptions",
    "logger",
    "setup_logger",
]
