from dataclasses import dataclass, field
from typing import Dict, Any, List


# -----------------------------
# EIP-712 Domain
# -----------------------------

@dataclass(frozen=True)
class EIP712Domain:
    """
    EIP-712 domain separator.
    Used to prevent signature replay across domains.
    """
    name: str
    version: str
    chainId: int
    verifyingContract: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chainId,
            "verifyingContract": self.verifyingContract,
        }


# -----------------------------
# x402 Payment authorization
# -----------------------------

#: Field layout of the ``Payment`` primary type. Order is part of the type hash.
PAYMENT_TYPE_FIELDS: List[Dict[str, str]] = [
    {"name": "recipient", "type": "address"},
    {"name": "amount", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "deadline", "type": "uint256"},
]


@dataclass(frozen=True)
class PaymentMessage:
    """
    Message payload of the x402 ``Payment`` typed structure.

    Attributes:
        recipient: Address receiving the payment (offer ``payTo``).
        amount: Amount in asset base units (uint256).
        nonce: Unique value per authorization (uint256).
        deadline: Unix timestamp after which the authorization is void.
    """
    recipient: str
    amount: int
    nonce: int
    deadline: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipient": self.recipient,
            "amount": self.amount,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }


@dataclass(frozen=True)
class PaymentTypedData:
    """
    Container for x402 payment typed data usable with EIP-712 signing routines.

    ``to_dict()`` produces the ``{types, primaryType, domain, message}``
    layout accepted by ``eth_account`` (``full_message=``) and by
    ``eth_signTypedData_v4``.
    """
    domain: EIP712Domain
    message: PaymentMessage

    primary_type: str = "Payment"

    types: Dict[str, List[Dict[str, str]]] = field(
        default_factory=lambda: {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
                {"name": "verifyingContract", "type": "address"},
            ],
            "Payment": [dict(f) for f in PAYMENT_TYPE_FIELDS],
        }
    )

    def to_dict(self) -> Dict[str, Any]:
        """Return a dictionary compatible with EIP-712 structured signing."""
        return {
            "types": self.types,
            "primaryType": self.primary_type,
            "domain": self.domain.to_dict(),
            "message": self.message.to_dict(),
        }
