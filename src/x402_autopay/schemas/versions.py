from enum import IntEnum

#: Header carrying the signed payment proof on the retried request.
PAYMENT_HEADER = "X-PAYMENT"

#: HTTP status that triggers the payment flow.
PAYMENT_REQUIRED_STATUS = 402


class ProtocolVersion(IntEnum):
    V1 = 1


#: Assumed when a challenge omits ``x402Version``.
DEFAULT_PROTOCOL_VERSION = ProtocolVersion.V1
