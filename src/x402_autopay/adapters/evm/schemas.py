"""
EVM Adapter Schema Models

Pydantic models for signed x402 payment authorizations.
"""

from typing import Any, Dict

from pydantic import Field

from ...schemas.bases import CanonicalModel


class PaymentAuthorization(CanonicalModel):
    """
    Signed off-chain payment authorization for one selected offer.

    The authorization is never broadcast; the resource server verifies it
    against the same domain and field layout used at signing.

    Attributes:
        signature: 65-byte ECDSA signature as a 0x-prefixed hex string.
        amount: Offer ``maxAmountRequired``, unchanged.
        asset: Payment asset contract (the EIP-712 ``verifyingContract``).
        recipient: Offer ``payTo``.
        payer: Address of the signing wallet.
        nonce: Unique value per authorization.
        deadline: Unix timestamp after which the authorization is void.
        network: Network alias as sent by the server.
        chain_id: Chain id the alias resolved to.
        scheme: Offer payment scheme.
        domain: EIP-712 domain used for signing.
    """
    signature: str = Field(..., description="0x-prefixed ECDSA signature")
    amount: str = Field(..., pattern=r"^[0-9]+$", description="Amount in asset base units")
    asset: str
    recipient: str
    payer: str
    nonce: int = Field(..., ge=0)
    deadline: int = Field(..., gt=0)
    network: str
    chain_id: int = Field(..., gt=0)
    scheme: str
    domain: Dict[str, Any] = Field(default_factory=dict)

    @property
    def asset_name(self) -> str:
        return str(self.domain.get("name", ""))
