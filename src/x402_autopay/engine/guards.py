"""
Spend cap enforcement.

Offers price in asset base units. The guard assumes a USDC-style stablecoin
with 6 decimals pegged 1:1 to USD; there is no price oracle. It runs before
any signing and hard-fails when the cost is above the caller's cap.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from ..adapters.evm.constants import STABLECOIN_DECIMALS, value_to_amount
from ..schemas.https import PaymentOffer
from .exceptions import ConfigurationError, ProtocolError, SpendCapExceededError

_SIX_PLACES = Decimal("0.000001")


def format_usd(value: Decimal) -> str:
    """Render a USD amount with six decimals, e.g. ``"0.050000"``."""
    return str(value.quantize(_SIX_PLACES))


def _as_cap(value: Any) -> Decimal:
    try:
        cap = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ConfigurationError(f"Invalid maximum payment: {value!r}") from exc
    if not cap.is_finite() or cap < 0:
        raise ConfigurationError(f"Maximum payment must be a non-negative number, got {value!r}")
    return cap


class SpendGuard:
    """
    Converts offer amounts to USD and enforces a maximum.

    Attributes:
        decimals: Decimal exponent of the payment asset.
    """

    def __init__(self, decimals: int = STABLECOIN_DECIMALS):
        self.decimals = decimals

    def to_usd(self, offer: PaymentOffer) -> Decimal:
        """USD-equivalent of ``offer.maxAmountRequired``."""
        try:
            return value_to_amount(value=offer.max_amount_required, decimals=self.decimals)
        except ValueError as exc:
            raise ProtocolError(
                f"Invalid maxAmountRequired {offer.max_amount_required!r}: {exc}"
            ) from exc

    def check(self, offer: PaymentOffer, max_payment_usd: Any) -> Decimal:
        """
        Enforce the spend cap.

        Args:
            offer: The selected offer.
            max_payment_usd: Caller cap in USD (Decimal, int, float or str).

        Returns:
            Decimal: The offer cost in USD when it is within the cap.

        Raises:
            SpendCapExceededError: If the cost is strictly greater than the cap.
            ConfigurationError: If the cap is negative or not a number.
        """
        cap = _as_cap(max_payment_usd)
        amount_usd = self.to_usd(offer)
        if amount_usd > cap:
            raise SpendCapExceededError(amount_usd, cap)
        return amount_usd
