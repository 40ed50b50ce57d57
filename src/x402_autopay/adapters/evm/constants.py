"""
EVM Chain Configuration

Provides the network alias registry used to turn the ``network`` string of a
402 offer into a chain id, plus the protocol defaults applied when an offer
leaves a field unspecified and the base-unit conversion helper.
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping

from pydantic import BaseModel, ConfigDict, Field

from ...engine.exceptions import UnsupportedNetworkError


#: EIP-712 domain ``name`` used when the offer has no ``extra.name``.
DEFAULT_DOMAIN_NAME = "USDC"

#: EIP-712 domain ``version`` used when the offer has no ``extra.version``.
DEFAULT_DOMAIN_VERSION = "2"

#: Authorization validity window when the offer has no ``maxTimeoutSeconds``.
DEFAULT_TIMEOUT_SECONDS = 60

#: Decimals assumed for the payment asset (USDC-style stablecoin).
STABLECOIN_DECIMALS = 6


class NetworkDescriptor(BaseModel):
    """EVM network resolved from one of its aliases."""
    model_config = ConfigDict(frozen=True)

    aliases: FrozenSet[str] = Field(..., description="Lower-case aliases for this chain")
    chain_id: int = Field(..., gt=0, description="EIP-155 chain id")
    canonical_name: str = Field(..., description="Human-readable network name")


# Raw network data. Keys are canonical names; every alias is lower-case.
_EVM_NETWORKS_DATA: Dict[str, Dict] = {
    "Ethereum": {"chain_id": 1, "aliases": ["ethereum", "eth", "mainnet"]},
    "Sepolia": {"chain_id": 11155111, "aliases": ["sepolia", "eth-sepolia"]},
    "Base": {"chain_id": 8453, "aliases": ["base", "base-mainnet"]},
    "Base Sepolia": {"chain_id": 84532, "aliases": ["base-sepolia"]},
    "Polygon": {"chain_id": 137, "aliases": ["polygon", "matic", "polygon-mainnet"]},
    "Polygon Mumbai": {"chain_id": 80001, "aliases": ["polygon-mumbai", "mumbai"]},
    "OP Mainnet": {"chain_id": 10, "aliases": ["optimism", "op", "op-mainnet"]},
    "OP Sepolia": {"chain_id": 11155420, "aliases": ["optimism-sepolia", "op-sepolia"]},
    "Arbitrum One": {"chain_id": 42161, "aliases": ["arbitrum", "arb", "arbitrum-one"]},
    "Arbitrum Sepolia": {"chain_id": 421614, "aliases": ["arbitrum-sepolia", "arb-sepolia"]},
    "Avalanche": {"chain_id": 43114, "aliases": ["avalanche", "avax", "avalanche-c"]},
    "Avalanche Fuji": {"chain_id": 43113, "aliases": ["avalanche-fuji", "fuji"]},
    "BNB Smart Chain": {"chain_id": 56, "aliases": ["bsc", "bnb", "binance", "bsc-mainnet"]},
    "BNB Smart Chain Testnet": {"chain_id": 97, "aliases": ["bsc-testnet", "bnb-testnet"]},
}


def _normalize_alias(alias: str) -> str:
    return alias.strip().lower()


class NetworkRegistry(Mapping[str, NetworkDescriptor]):
    """
    Immutable, case-insensitive alias -> ``NetworkDescriptor`` table.

    Behaves as a read-only mapping keyed by normalized alias. Build a custom
    instance to inject synthetic chains (e.g. in tests); production code uses
    ``DEFAULT_NETWORK_REGISTRY``.

    Example:
        registry = NetworkRegistry([
            NetworkDescriptor(aliases=frozenset({"devnet"}), chain_id=31337, canonical_name="Devnet"),
        ])
        registry.resolve("DevNet").chain_id  # 31337
    """

    def __init__(self, descriptors: Iterable[NetworkDescriptor]):
        table: Dict[str, NetworkDescriptor] = {}
        for descriptor in descriptors:
            for alias in descriptor.aliases:
                key = _normalize_alias(alias)
                existing = table.get(key)
                if existing is not None and existing != descriptor:
                    raise ValueError(
                        f"Alias '{key}' is claimed by both {existing.canonical_name} "
                        f"and {descriptor.canonical_name}"
                    )
                table[key] = descriptor
        self._table = table

    @classmethod
    def from_data(cls, data: Mapping[str, Mapping]) -> "NetworkRegistry":
        """Build a registry from ``{canonical_name: {chain_id, aliases}}`` data."""
        return cls(
            NetworkDescriptor(
                canonical_name=name,
                chain_id=entry["chain_id"],
                aliases=frozenset(_normalize_alias(a) for a in entry["aliases"]),
            )
            for name, entry in data.items()
        )

    def resolve(self, alias: str) -> NetworkDescriptor:
        """
        Resolve a network alias.

        Args:
            alias: Network alias, any case, surrounding whitespace ignored.

        Returns:
            NetworkDescriptor: The chain the alias refers to.

        Raises:
            UnsupportedNetworkError: If the alias is unknown. The error lists
                every supported alias.
        """
        if isinstance(alias, str):
            descriptor = self._table.get(_normalize_alias(alias))
            if descriptor is not None:
                return descriptor
        raise UnsupportedNetworkError(str(alias), self.aliases())

    def aliases(self) -> List[str]:
        return sorted(self._table)

    def __getitem__(self, alias: str) -> NetworkDescriptor:
        return self._table[_normalize_alias(alias)]

    def __contains__(self, alias: object) -> bool:
        return isinstance(alias, str) and _normalize_alias(alias) in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)


DEFAULT_NETWORK_REGISTRY = NetworkRegistry.from_data(_EVM_NETWORKS_DATA)


def value_to_amount(*, value: int | str | Decimal, decimals: int) -> Decimal:
    """Convert a smallest-unit integer `value` into a human-readable `Decimal` amount.

    The division is exact; no float is involved at any point.

    Args:
        value: Smallest-unit integer value (e.g. 50000 for 0.05 USDC). Accepts int/str/Decimal.
        decimals: Token decimals (e.g. 6 for USDC).

    Returns:
        Decimal: Human-readable amount.

    Raises:
        ValueError: If inputs are invalid.
    """
    if not isinstance(decimals, int) or decimals < 0:
        raise ValueError("decimals must be a non-negative int")

    try:
        dec_value = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"Invalid value: {value!r}") from e

    if not dec_value.is_finite() or dec_value < 0:
        raise ValueError("value must be a non-negative finite number")

    if dec_value != dec_value.to_integral_value():
        raise ValueError("value must be an integer in smallest units")

    return dec_value.scaleb(-decimals)
