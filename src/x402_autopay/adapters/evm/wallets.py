"""
Wallet Account Derivation

Turns credential material (a base64-encoded HD master seed) into a
``TypedDataSigner`` for the first Ethereum account of that seed. Derivation
follows BIP-32/BIP-44 on the default Ethereum path, so the same seed always
yields the same account.
"""

import base64
import binascii
from typing import Any, Dict

from eth_account import Account
from eth_account.hdaccount import ETHEREUM_DEFAULT_PATH, key_from_seed
from eth_account.signers.local import LocalAccount

from ..bases import TypedDataSigner
from ...engine.exceptions import ConfigurationError


class LocalAccountSigner(TypedDataSigner):
    """
    In-process signing capability backed by an ``eth_account`` LocalAccount.

    Signing is performed entirely locally via ``Account.sign_typed_data``;
    no RPC endpoint or network connection is required.
    """

    def __init__(self, account: LocalAccount):
        self._account = account

    @classmethod
    def from_key(cls, private_key: str) -> "LocalAccountSigner":
        return cls(Account.from_key(private_key))

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_typed_data(self, typed_data: Dict[str, Any]) -> str:
        signed = Account.sign_typed_data(self._account.key, full_message=typed_data)
        return "0x" + bytes(signed.signature).hex()

    def __repr__(self) -> str:
        return f"LocalAccountSigner(address={self.address})"


def decode_wallet_seed(wallet_seed: str) -> bytes:
    """
    Decode a base64 wallet seed.

    Raises:
        ConfigurationError: If the seed is empty or not valid base64.
    """
    if not isinstance(wallet_seed, str) or not wallet_seed.strip():
        raise ConfigurationError("Wallet seed is required")
    try:
        seed = base64.b64decode(wallet_seed.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError("Wallet seed is not valid base64") from exc
    if not seed:
        raise ConfigurationError("Wallet seed decodes to an empty byte string")
    return seed


def derive_account(wallet_seed: str, path: str = ETHEREUM_DEFAULT_PATH) -> LocalAccountSigner:
    """
    Derive a deterministic account from a base64-encoded master seed.

    Args:
        wallet_seed: Base64 encoding of the BIP-32 master seed bytes.
        path: BIP-44 derivation path. Defaults to ``m/44'/60'/0'/0/0``.

    Returns:
        LocalAccountSigner: Signing capability for the derived account.

    Raises:
        ConfigurationError: If the seed cannot be decoded or derivation fails.
    """
    seed = decode_wallet_seed(wallet_seed)
    try:
        private_key = key_from_seed(seed, path)
    except ValueError as exc:
        raise ConfigurationError(f"Cannot derive account from wallet seed: {exc}") from exc
    return LocalAccountSigner(Account.from_key(private_key))
