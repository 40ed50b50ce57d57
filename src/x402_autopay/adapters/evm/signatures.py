"""
EVM Off-Chain Signing Utilities

Builds the EIP-712 ``Payment`` typed data for a selected x402 offer and
obtains a signature for it from a ``TypedDataSigner``. Nothing here talks to
a chain: the resulting authorization is an off-chain message verified by the
resource server.

Exported helpers
----------------
generate_nonce
    Unique uint256 nonce per authorization, safe under concurrent use.

compute_deadline
    ``now + maxTimeoutSeconds`` (60 seconds when the offer has none).

build_payment_typed_data
    Low-level helper that builds the ``PaymentTypedData`` envelope without
    signing. Useful when the signing step is handled externally.

sign_payment_authorization
    Build, sign and return a complete ``PaymentAuthorization``.
"""

import os
import threading
import time
from typing import Optional

from web3 import Web3

from ..bases import TypedDataSigner
from ...engine.exceptions import SigningError
from ...schemas.https import PaymentOffer
from ...utils import logger, short_hex
from .constants import (
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    DEFAULT_TIMEOUT_SECONDS,
    NetworkDescriptor,
)
from .schemas import PaymentAuthorization
from .standards import EIP712Domain, PaymentMessage, PaymentTypedData


# ---------------------------------------------------------------------------
# Nonce and deadline
# ---------------------------------------------------------------------------

_nonce_lock = threading.Lock()
_last_nonce = 0


def generate_nonce() -> int:
    """
    Return a nonce that is unique for this process.

    The value is the millisecond timestamp shifted left by 64 bits with 64
    random bits mixed in, then forced strictly above the previously issued
    nonce. Two calls within the same clock tick, or from concurrent items,
    therefore never collide.
    """
    global _last_nonce

    candidate = (int(time.time() * 1000) << 64) | int.from_bytes(os.urandom(8), "big")
    with _nonce_lock:
        if candidate <= _last_nonce:
            candidate = _last_nonce + 1
        _last_nonce = candidate
    return candidate


def compute_deadline(max_timeout_seconds: Optional[int], now: Optional[float] = None) -> int:
    """
    Compute the authorization deadline.

    Args:
        max_timeout_seconds: Offer validity window. ``None`` or ``0`` falls
            back to ``DEFAULT_TIMEOUT_SECONDS``.
        now: Issue time as a unix timestamp; defaults to the current time.

    Returns:
        int: Unix timestamp strictly greater than ``now``.
    """
    issued_at = time.time() if now is None else now
    timeout = max_timeout_seconds or DEFAULT_TIMEOUT_SECONDS
    return int(issued_at) + int(timeout)


# ---------------------------------------------------------------------------
# Typed-data builder
# ---------------------------------------------------------------------------

def build_payment_typed_data(
    offer: PaymentOffer,
    *,
    chain_id: int,
    nonce: int,
    deadline: int,
) -> PaymentTypedData:
    """
    Wrap an offer in an EIP-712 ``PaymentTypedData`` envelope without signing.

    The domain is ``{name, version, chainId, verifyingContract=asset}`` where
    ``name`` and ``version`` come from ``offer.extra`` and fall back to
    ``"USDC"`` / ``"2"``.

    Args:
        offer: The selected payment offer.
        chain_id: Chain id resolved from ``offer.network``.
        nonce: Unique nonce for this authorization.
        deadline: Expiry unix timestamp.

    Returns:
        ``PaymentTypedData`` whose ``to_dict()`` is compatible with
        ``eth_account.Account.sign_typed_data(full_message=...)``.

    Raises:
        SigningError: If ``payTo`` or ``asset`` is not a valid address.
    """
    try:
        recipient = Web3.to_checksum_address(offer.pay_to)
        verifying_contract = Web3.to_checksum_address(offer.asset)
    except (ValueError, TypeError) as exc:
        raise SigningError(f"Offer contains an invalid address: {exc}") from exc

    domain = EIP712Domain(
        name=str(offer.extra_value("name") or DEFAULT_DOMAIN_NAME),
        version=str(offer.extra_value("version") or DEFAULT_DOMAIN_VERSION),
        chainId=chain_id,
        verifyingContract=verifying_contract,
    )
    message = PaymentMessage(
        recipient=recipient,
        amount=int(offer.max_amount_required),
        nonce=nonce,
        deadline=deadline,
    )
    return PaymentTypedData(domain=domain, message=message)


# ---------------------------------------------------------------------------
# Signer
# ---------------------------------------------------------------------------

async def sign_payment_authorization(
    offer: PaymentOffer,
    network: NetworkDescriptor,
    signer: TypedDataSigner,
    *,
    payer: Optional[str] = None,
    now: Optional[float] = None,
    nonce: Optional[int] = None,
) -> PaymentAuthorization:
    """
    Sign an x402 payment authorization for ``offer``.

    The signature is produced by ``signer``; this function never sees key
    material.

    Args:
        offer: The selected payment offer.
        network: Descriptor resolved from ``offer.network``.
        signer: Signing capability bound to the paying account.
        payer: Payer address reported to the server. Defaults to
            ``signer.address``.
        now: Issue time; defaults to the current time.
        nonce: Explicit nonce; generated when omitted.

    Returns:
        ``PaymentAuthorization`` with ``amount`` equal to the offer's
        ``maxAmountRequired`` and ``deadline`` in the future.

    Raises:
        SigningError: If the typed data cannot be built, the deadline is not
            in the future, or the signer fails.

    Example::

        authorization = await sign_payment_authorization(
            offer,
            DEFAULT_NETWORK_REGISTRY.resolve(offer.network),
            derive_account(wallet_seed),
        )
    """
    issued_at = time.time() if now is None else now
    deadline = compute_deadline(offer.max_timeout_seconds, issued_at)
    if deadline <= issued_at:
        raise SigningError(f"Deadline {deadline} is not in the future")

    resolved_nonce = generate_nonce() if nonce is None else nonce
    typed_data = build_payment_typed_data(
        offer,
        chain_id=network.chain_id,
        nonce=resolved_nonce,
        deadline=deadline,
    )

    try:
        signature = await signer.sign_typed_data(typed_data.to_dict())
    except Exception as exc:
        raise SigningError(f"Failed to sign payment authorization: {exc}") from exc

    if not isinstance(signature, str) or not signature:
        raise SigningError("Signer returned an empty signature")
    if not signature.startswith("0x"):
        signature = "0x" + signature

    logger.debug(
        f"Signed payment authorization on {network.canonical_name} "
        f"(chainId={network.chain_id}, amount={offer.max_amount_required}, "
        f"signature={short_hex(signature)})"
    )

    return PaymentAuthorization(
        signature=signature,
        amount=offer.max_amount_required,
        asset=offer.asset,
        recipient=offer.pay_to,
        payer=payer or signer.address,
        nonce=resolved_nonce,
        deadline=deadline,
        network=offer.network,
        chain_id=network.chain_id,
        scheme=offer.scheme,
        domain=typed_data.domain.to_dict(),
    )
