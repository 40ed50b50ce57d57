"""
Signing adapters.

Exposes the abstract ``TypedDataSigner`` capability and the EVM
implementation used for x402 payment authorizations.
"""

from .bases import TypedDataSigner
from .evm import (
    DEFAULT_NETWORK_REGISTRY,
    LocalAccountSigner,
    NetworkDescriptor,
    NetworkRegistry,
    PaymentAuthorization,
    derive_account,
    sign_payment_authorization,
)

__all__ = [
    "TypedDataSigner",
    "DEFAULT_NETWORK_REGISTRY",
    "LocalAccountSigner",
    "NetworkDescriptor",
    "NetworkRegistry",
    "PaymentAuthorization",
    "derive_account",
    "sign_payment_authorization",
]
