"""
EVM adapter: network registry, EIP-712 payment typed data, account
derivation and off-chain authorization signing.
"""

from .constants import (
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    DEFAULT_NETWORK_REGISTRY,
    DEFAULT_TIMEOUT_SECONDS,
    STABLECOIN_DECIMALS,
    NetworkDescriptor,
    NetworkRegistry,
    value_to_amount,
)
from .schemas import PaymentAuthorization
from .signatures import (
    build_payment_typed_data,
    compute_deadline,
    generate_nonce,
    sign_payment_authorization,
)
from .standards import EIP712Domain, PaymentMessage, PaymentTypedData
from .wallets import LocalAccountSigner, decode_wallet_seed, derive_account

__all__ = [
    "DEFAULT_DOMAIN_NAME",
    "DEFAULT_DOMAIN_VERSION",
    "DEFAULT_NETWORK_REGISTRY",
    "DEFAULT_TIMEOUT_SECONDS",
    "STABLECOIN_DECIMALS",
    "NetworkDescriptor",
    "NetworkRegistry",
    "value_to_amount",
    "PaymentAuthorization",
    "build_payment_typed_data",
    "compute_deadline",
    "generate_nonce",
    "sign_payment_authorization",
    "EIP712Domain",
    "PaymentMessage",
    "PaymentTypedData",
    "LocalAccountSigner",
    "decode_wallet_seed",
    "derive_account",
]
