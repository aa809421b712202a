"""
Balance Reader.

Reads the native balance and every tracked token balance of an account on all
supported chains. Each read is isolated: a failure is recorded on the single
TokenBalance it concerns and never aborts the rest of the snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from ..core.bridge.chain_registry import ChainRegistry
from ..core.bridge.constants import TRACKED_SYMBOLS
from ..core.errors import BridgerError
from ..providers.rpc import EvmRpcProvider
from .evm import Erc20Reader, format_units

logger = logging.getLogger(__name__)


@dataclass
class TokenBalance:
    """Balance of one asset on one chain. ``address`` is None for the native asset."""
    symbol: str
    owner: str
    chain_id: int
    address: Optional[str]
    raw: Optional[int] = None
    decimals: int = 18
    formatted: str = "0"
    error: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return self.error is None and self.raw is not None


@dataclass
class ChainBalances:
    chain_id: int
    name: str
    native: TokenBalance
    tokens: Dict[str, TokenBalance] = field(default_factory=dict)


@dataclass
class AccountBalanceSnapshot:
    owner: str
    chains: Dict[int, ChainBalances] = field(default_factory=dict)

    def token(self, chain_id: int, symbol: str) -> Optional[TokenBalance]:
        chain = self.chains.get(chain_id)
        if chain is None:
            return None
        return chain.tokens.get(symbol)

    def native(self, chain_id: int) -> Optional[TokenBalance]:
        chain = self.chains.get(chain_id)
        return chain.native if chain else None

    def iter_tokens(self, symbol: str) -> Iterator[TokenBalance]:
        """Yield the ``symbol`` balance of every chain, in chain order."""
        for chain in self.chains.values():
            balance = chain.tokens.get(symbol)
            if balance is not None:
                yield balance


class BalanceReader:
    def __init__(
        self,
        rpc: EvmRpcProvider,
        registry: ChainRegistry,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.rpc = rpc
        self.registry = registry
        self.erc20 = Erc20Reader(rpc)
        self._logger = logger or logging.getLogger(__name__)

    async def native_balance(self, chain_id: int, owner: str) -> TokenBalance:
        chain = self.registry.describe(chain_id)
        balance = TokenBalance(
            symbol=chain.native_symbol,
            owner=owner,
            chain_id=chain_id,
            address=None,
            decimals=chain.native_decimals,
        )
        try:
            balance.raw = await self.rpc.get_balance(chain_id, owner)
            balance.formatted = format_units(balance.raw, balance.decimals)
        except (BridgerError, ValueError) as exc:
            self._logger.warning("Native balance read failed on %s: %s", chain.name, exc)
            balance.error = str(exc)
        return balance

    async def token_balance(self, chain_id: int, symbol: str, owner: str) -> TokenBalance:
        address = self.registry.token_address(chain_id, symbol)
        balance = TokenBalance(symbol=symbol, owner=owner, chain_id=chain_id, address=address)
        try:
            balance.decimals = await self.erc20.decimals(chain_id, address)
            balance.raw = await self.erc20.balance_of(chain_id, address, owner)
            balance.formatted = format_units(balance.raw, balance.decimals)
        except (BridgerError, ValueError) as exc:
            self._logger.warning(
                "%s balance read failed on %s: %s",
                symbol,
                self.registry.chain_name(chain_id),
                exc,
            )
            balance.raw = None
            balance.formatted = "0"
            balance.error = str(exc)
        return balance

    async def snapshot(self, owner: str) -> AccountBalanceSnapshot:
        """Read every tracked balance of ``owner``, sequentially, on all chains."""
        snapshot = AccountBalanceSnapshot(owner=owner)
        for chain_id in self.registry.ordered_chain_ids():
            chain = self.registry.describe(chain_id)
            native = await self.native_balance(chain_id, owner)
            tokens: Dict[str, TokenBalance] = {}
            for symbol in TRACKED_SYMBOLS:
                tokens[symbol] = await self.token_balance(chain_id, symbol, owner)
            snapshot.chains[chain_id] = ChainBalances(
                chain_id=chain_id,
                name=chain.name,
                native=native,
                tokens=tokens,
            )
        return snapshot
