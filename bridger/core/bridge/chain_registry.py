"""Static registry of the networks bridger operates on."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, FrozenSet, Mapping, Optional, Tuple

from ..errors import UnknownChainError, UnknownTokenError
from .constants import CHAIN_METADATA, SUPPORTED_CHAIN_IDS

if TYPE_CHECKING:  # pragma: no cover
    from ...config import Settings


@dataclass(frozen=True)
class ChainDescriptor:
    chain_id: int
    name: str
    rpc_url: str
    tokens: Mapping[str, str] = field(default_factory=dict)
    native_symbol: str = "ETH"
    native_decimals: int = 18

    def token_address(self, symbol: str) -> str:
        try:
            return self.tokens[symbol.upper()]
        except KeyError:
            raise UnknownTokenError(symbol, self.chain_id) from None


class ChainRegistry:
    """Lookup of chain descriptors by chain id.

    Usage:
        registry = ChainRegistry.from_settings(settings)
        base = registry.describe(8453)
        usdc = registry.token_address(8453, "USDC")
    """

    def __init__(self, rpc_overrides: Optional[Mapping[int, str]] = None) -> None:
        overrides = dict(rpc_overrides or {})
        self._chains: Dict[int, ChainDescriptor] = {}
        for chain_id in SUPPORTED_CHAIN_IDS:
            meta = CHAIN_METADATA[chain_id]
            self._chains[chain_id] = ChainDescriptor(
                chain_id=chain_id,
                name=meta["name"],
                rpc_url=overrides.get(chain_id) or meta["rpc_url"],
                tokens=dict(meta["tokens"]),
                native_symbol=meta["native_symbol"],
                native_decimals=meta["native_decimals"],
            )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ChainRegistry":
        return cls(rpc_overrides=settings.rpc_urls)

    def describe(self, chain_id: int) -> ChainDescriptor:
        try:
            return self._chains[int(chain_id)]
        except (KeyError, TypeError, ValueError):
            raise UnknownChainError(chain_id) from None

    def all_chain_ids(self) -> FrozenSet[int]:
        return frozenset(self._chains)

    def ordered_chain_ids(self) -> Tuple[int, ...]:
        return tuple(self._chains)

    def chain_name(self, chain_id: int) -> str:
        return self.describe(chain_id).name

    def token_address(self, chain_id: int, symbol: str) -> str:
        return self.describe(chain_id).token_address(symbol)

    def symbol_for(self, chain_id: int, address: str) -> Optional[str]:
        """Reverse lookup of a tracked token symbol by contract address."""
        target = (address or "").lower()
        for symbol, token in self.describe(chain_id).tokens.items():
            if token.lower() == target:
                return symbol
        return None

    def rpc_urls(self) -> Dict[int, str]:
        return {chain_id: chain.rpc_url for chain_id, chain in self._chains.items()}
