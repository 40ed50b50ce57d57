from .bases import CanonicalModel
from .https import (
    PaymentOffer,
    PaymentChallenge,
    PaymentHeader,
    RequestContext,
    RequestOptions,
    HeaderParameter,
    DispatchResponse,
    PaymentReceipt,
    PaymentResult,
)
from .versions import PAYMENT_HEADER, PAYMENT_REQUIRED_STATUS, ProtocolVersion, DEFAULT_PROTOCOL_VERSION

__all__ = [
    "CanonicalModel",
    "PaymentOffer",
    "PaymentChallenge",
    "PaymentHeader",
    "RequestContext",
    "RequestOptions",
    "HeaderParameter",
    "DispatchResponse",
    "PaymentReceipt",
    "PaymentResult",
    "PAYMENT_HEADER",
    "PAYMENT_REQUIRED_STATUS",
    "ProtocolVersion",
    "DEFAULT_PROTOCOL_VERSION",
]
