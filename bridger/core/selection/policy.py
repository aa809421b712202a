"""Token-selection policy: which balance to move and where to send it."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from ...services.balances import AccountBalanceSnapshot, TokenBalance
from ..bridge.constants import SUPPORTED_CHAIN_IDS
from ..errors import UnknownChainError, UnknownTokenError

# Minimum raw balances worth moving
MIN_BRIDGE_AMOUNTS: Dict[str, int] = {
    "WETH": 10**15,   # 0.001 WETH
    "USDC": 10**6,    # 1 USDC
}

TARGET_TOKENS: Dict[str, str] = {
    "WETH": "USDC",
    "USDC": "WETH",
}

# WETH balances are always preferred over USDC balances
SELECTION_PRIORITY = ("WETH", "USDC")


@dataclass(frozen=True)
class BridgeCandidate:
    symbol: str
    chain_id: int
    token_address: str
    balance: int
    decimals: int
    target_symbol: str


def opposite_symbol(symbol: str) -> str:
    try:
        return TARGET_TOKENS[symbol.upper()]
    except KeyError:
        raise UnknownTokenError(symbol, 0) from None


def _largest_qualifying(balances: Iterable[TokenBalance], minimum: int) -> Optional[TokenBalance]:
    best: Optional[TokenBalance] = None
    for balance in balances:
        if not balance.is_available or balance.address is None:
            continue
        if balance.raw < minimum:
            continue
        # Strictly greater keeps the first chain on ties
        if best is None or balance.raw > best.raw:
            best = balance
    return best


def select_candidate(snapshot: AccountBalanceSnapshot) -> Optional[BridgeCandidate]:
    """Pick the balance to move, or ``None`` when nothing meets its threshold."""
    for symbol in SELECTION_PRIORITY:
        best = _largest_qualifying(snapshot.iter_tokens(symbol), MIN_BRIDGE_AMOUNTS[symbol])
        if best is not None:
            return BridgeCandidate(
                symbol=symbol,
                chain_id=best.chain_id,
                token_address=best.address,
                balance=best.raw,
                decimals=best.decimals,
                target_symbol=TARGET_TOKENS[symbol],
            )
    return None


def pick_destination(
    source_chain_id: int,
    rng: random.Random,
    chain_ids: Iterable[int] = SUPPORTED_CHAIN_IDS,
) -> int:
    """Uniformly choose a supported chain other than the source."""
    options = [chain_id for chain_id in chain_ids if chain_id != source_chain_id]
    if not options:
        raise UnknownChainError(source_chain_id)
    return rng.choice(options)
