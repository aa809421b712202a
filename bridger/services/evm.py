"""Utilities for reading ERC-20 state on EVM-compatible chains."""

from __future__ import annotations

from decimal import Decimal

from ..core.execution.tx_builder import decode_uint256, encode_balance_of, encode_decimals
from ..providers.rpc import EvmRpcProvider


def format_units(raw: int, decimals: int) -> str:
    """Render a raw integer amount in human units without float rounding."""

    value = Decimal(raw) / (Decimal(10) ** decimals)
    text = format(value.normalize(), "f")
    return text if text != "-0" else "0"


def to_raw_units(amount: float | str | Decimal, decimals: int) -> int:
    """Convert a human amount to integer base units."""

    return int(Decimal(str(amount)) * (Decimal(10) ** decimals))


class Erc20Reader:
    """Read-only ERC-20 calls over ``eth_call``."""

    def __init__(self, rpc: EvmRpcProvider) -> None:
        self.rpc = rpc

    async def balance_of(self, chain_id: int, token: str, owner: str) -> int:
        return decode_uint256(await self.rpc.eth_call(chain_id, token, encode_balance_of(owner)))

    async def decimals(self, chain_id: int, token: str) -> int:
        return decode_uint256(await self.rpc.eth_call(chain_id, token, encode_decimals()))


__all__ = [
    "Erc20Reader",
    "format_units",
    "to_raw_units",
]
