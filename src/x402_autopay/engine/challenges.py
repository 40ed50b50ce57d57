"""
Payment challenge parsing and offer selection.

A 402 body is either a valid ``PaymentChallenge`` or a ``ProtocolError``;
an empty or malformed body never means "no payment needed".
"""

import json
from typing import Any

from pydantic import ValidationError

from ..schemas.https import PaymentChallenge, PaymentOffer
from ..utils import logger
from .exceptions import NoOfferError, ProtocolError


def _load_body(raw_body: Any) -> Any:
    if isinstance(raw_body, (bytes, bytearray)):
        try:
            raw_body = raw_body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProtocolError("Received 402 status but the body is not UTF-8 text") from exc

    if isinstance(raw_body, str):
        if not raw_body.strip():
            return None
        try:
            return json.loads(raw_body)
        except json.JSONDecodeError as exc:
            raise ProtocolError("Received 402 status but the body is not valid JSON") from exc

    return raw_body


def parse_challenge(raw_body: Any) -> PaymentChallenge:
    """
    Validate a 402 response body against the x402 challenge schema.

    Args:
        raw_body: Decoded JSON object, or str/bytes holding JSON.

    Returns:
        PaymentChallenge: Parsed challenge. ``accepts`` may be empty; see
        ``select_offer``.

    Raises:
        ProtocolError: If the body is missing, not a JSON object, has no
            ``accepts`` list, or an offer is missing required fields.
    """
    body = _load_body(raw_body)

    if not body or not isinstance(body, dict):
        raise ProtocolError("Received 402 status but invalid x402 response format")

    accepts = body.get("accepts")
    if not isinstance(accepts, list):
        raise ProtocolError(
            "Received 402 status but invalid x402 response format: 'accepts' must be a list"
        )

    try:
        challenge = PaymentChallenge.model_validate(body)
    except ValidationError as exc:
        raise ProtocolError(f"Received 402 status but the x402 challenge is invalid: {exc}") from exc

    logger.debug(
        f"Parsed x402 challenge: version={challenge.x402_version}, "
        f"offers={len(challenge.accepts)}, error={challenge.error!r}"
    )
    return challenge


def select_offer(challenge: PaymentChallenge) -> PaymentOffer:
    """
    Select the offer to pay.

    Always the first entry of ``accepts``; no price or network preference is
    applied.

    Raises:
        NoOfferError: If ``accepts`` is empty.
    """
    if not challenge.accepts:
        raise NoOfferError("No payment options available in x402 response")
    return challenge.accepts[0]
