"""
``X-PAYMENT`` header encoding.

The header value is compact JSON with a fixed key order, so encoding the
same authorization twice yields byte-identical values.
"""

import json

from pydantic import ValidationError

from ..adapters.evm.schemas import PaymentAuthorization
from ..engine.exceptions import ProtocolError
from ..schemas.https import PaymentChallenge, PaymentHeader, PaymentOffer


def build_payment_header(
    challenge: PaymentChallenge,
    offer: PaymentOffer,
    authorization: PaymentAuthorization,
) -> PaymentHeader:
    """Assemble the header model from the challenge, offer and authorization."""
    return PaymentHeader(
        version=challenge.x402_version,
        scheme=offer.scheme,
        signature=authorization.signature,
        amount=authorization.amount,
        asset=authorization.asset,
        recipient=authorization.recipient,
        payer=authorization.payer,
        nonce=str(authorization.nonce),
        deadline=str(authorization.deadline),
        network=offer.network,
    )


def encode_payment_header(
    challenge: PaymentChallenge,
    offer: PaymentOffer,
    authorization: PaymentAuthorization,
) -> str:
    """
    Serialize the payment proof for the ``X-PAYMENT`` header.

    Returns:
        str: ``{"version", "scheme", "signature", "amount", "asset",
        "recipient", "payer", "nonce", "deadline", "network"}`` as compact
        JSON in that key order.
    """
    header = build_payment_header(challenge, offer, authorization)
    return json.dumps(header.model_dump(mode="json"), separators=(",", ":"), ensure_ascii=False)


def decode_payment_header(value: str) -> PaymentHeader:
    """
    Parse an ``X-PAYMENT`` header value.

    Raises:
        ProtocolError: If the value is not JSON or misses required fields.
    """
    try:
        return PaymentHeader.model_validate_json(value)
    except ValidationError as exc:
        raise ProtocolError(f"Invalid payment header: {exc}") from exc
