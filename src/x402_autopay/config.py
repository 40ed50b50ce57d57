"""
Client configuration.

Settings come from the process environment, optionally seeded from a dotenv
file. Credential material is validated here so the payment flow only ever
receives a ready signing capability and a payer address.

Environment Variables:
    - X402_WALLET_SEED: Base64-encoded HD master seed (required to pay)
    - X402_WALLET_ADDRESS: Expected payer address (optional)
    - X402_MAX_PAYMENT_USD: Default spend cap per request (default 0.1)
    - X402_REQUEST_TIMEOUT: HTTP timeout in seconds (default 60)
"""

import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Tuple, Union

import dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .adapters.evm.wallets import LocalAccountSigner, derive_account
from .engine.exceptions import ConfigurationError

DEFAULT_MAX_PAYMENT_USD = Decimal("0.1")
DEFAULT_REQUEST_TIMEOUT = 60.0


class WalletCredential(BaseModel):
    """Wallet credential record: base64 seed plus optional expected address."""
    wallet_seed: str = Field(..., repr=False, description="Base64-encoded HD master seed")
    wallet_address: Optional[str] = Field(default=None, description="Expected payer address")

    def signer(self) -> LocalAccountSigner:
        """Derive the signing capability for this credential."""
        return derive_account(self.wallet_seed)

    def resolve(self) -> Tuple[LocalAccountSigner, str]:
        """
        Derive the signer and determine the payer address.

        Returns:
            (signer, payer): ``payer`` is ``wallet_address`` when set,
            otherwise the derived address.

        Raises:
            ConfigurationError: If the seed is invalid or ``wallet_address``
                does not match the derived account.
        """
        signer = self.signer()
        if not self.wallet_address:
            return signer, signer.address
        if self.wallet_address.strip().lower() != signer.address.lower():
            raise ConfigurationError(
                f"Wallet address {self.wallet_address} does not match the account "
                f"derived from the wallet seed ({signer.address})"
            )
        return signer, self.wallet_address.strip()


class ClientSettings(BaseModel):
    """Runtime settings for the x402 client."""
    wallet_seed: Optional[str] = Field(default=None, repr=False)
    wallet_address: Optional[str] = None
    max_payment_usd: Decimal = Field(default=DEFAULT_MAX_PAYMENT_USD, ge=0)
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)

    @field_validator("wallet_seed", "wallet_address", mode="before")
    @classmethod
    def _blank_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def credential(self) -> WalletCredential:
        """
        Raises:
            ConfigurationError: If no wallet seed is configured.
        """
        if not self.wallet_seed:
            raise ConfigurationError("Wallet seed is required")
        return WalletCredential(wallet_seed=self.wallet_seed, wallet_address=self.wallet_address)


def load_settings(env_file: Optional[Union[str, Path]] = None) -> ClientSettings:
    """
    Load settings from the environment.

    Args:
        env_file: Optional dotenv file. Values already present in the
            environment take precedence.

    Raises:
        FileNotFoundError: If ``env_file`` is given but does not exist.
        ConfigurationError: If a value is present but invalid.
    """
    if env_file is not None:
        env_path = Path(env_file)
        if not env_path.exists():
            raise FileNotFoundError(f"Config path is not exist: {env_path}")
        dotenv.load_dotenv(dotenv_path=env_path)

    values = {
        "wallet_seed": os.getenv("X402_WALLET_SEED"),
        "wallet_address": os.getenv("X402_WALLET_ADDRESS"),
        "max_payment_usd": os.getenv("X402_MAX_PAYMENT_USD"),
        "request_timeout": os.getenv("X402_REQUEST_TIMEOUT"),
    }
    try:
        return ClientSettings(**{k: v for k, v in values.items() if v is not None})
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid client configuration: {exc}") from exc
