"""Swap quote models and the 1inch response adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..bridge.constants import NATIVE_PLACEHOLDER
from ..errors import MalformedQuoteError
from ..execution.tx_builder import parse_quantity


@dataclass(frozen=True)
class TokenRef:
    address: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class TxPayload:
    """Executable ``{to, data, value}`` triple returned by an aggregator."""
    to: str
    data: str
    value: int = 0
    chain_id: Optional[int] = None


@dataclass
class SwapQuote:
    chain_id: int
    src_token: TokenRef
    dst_token: TokenRef
    amount_in: int
    expected_amount_out: int
    tx: TxPayload
    spender: str
    raw: Dict[str, Any]


@dataclass
class SwapExecution:
    success: bool
    tx_hash: Optional[str]
    output_amount: int
    output_token: TokenRef


def _token_from_response(value: Any, fallback: TokenRef, chain_id: int) -> TokenRef:
    if not isinstance(value, Mapping):
        return fallback
    address = value.get("address")
    if not address:
        return fallback
    if not isinstance(address, str):
        raise MalformedQuoteError(f"Swap output token address is not a string: {address!r}", chain_id=chain_id)
    if address.lower() == NATIVE_PLACEHOLDER:
        return fallback
    decimals = value.get("decimals")
    try:
        resolved_decimals = int(decimals) if decimals is not None else fallback.decimals
    except (TypeError, ValueError) as exc:
        raise MalformedQuoteError(f"Swap output token has invalid decimals: {decimals!r}", chain_id=chain_id) from exc
    return TokenRef(
        address=address,
        symbol=value.get("symbol") or fallback.symbol,
        decimals=resolved_decimals,
    )


def _is_hex_field(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def normalize_swap_response(
    raw: Mapping[str, Any],
    *,
    chain_id: int,
    src_token: TokenRef,
    dst_token: TokenRef,
    amount_in: int,
) -> SwapQuote:
    """Map a 1inch swap response onto ``SwapQuote``.

    Accepts both the current (``dstAmount``/``dstToken``) and legacy
    (``toAmount``/``toToken``/``amount``) field names. A missing or zero
    output token address falls back to the requested destination token.
    """
    if not isinstance(raw, Mapping):
        raise MalformedQuoteError("Swap response is not an object", chain_id=chain_id)

    amount_out = raw.get("dstAmount")
    if amount_out is None:
        amount_out = raw.get("toAmount")
    if amount_out is None:
        amount_out = raw.get("amount")
    if amount_out is None:
        raise MalformedQuoteError("Swap response has no output amount", chain_id=chain_id)

    tx = raw.get("tx")
    if not isinstance(tx, Mapping) or not _is_hex_field(tx.get("to")) or not _is_hex_field(tx.get("data")):
        raise MalformedQuoteError("Swap response has no executable transaction", chain_id=chain_id)

    try:
        expected = parse_quantity(amount_out)
        value = parse_quantity(tx.get("value", 0))
    except (TypeError, ValueError) as exc:
        raise MalformedQuoteError(f"Swap response has invalid amounts: {exc}", chain_id=chain_id) from exc

    resolved_dst = _token_from_response(raw.get("dstToken") or raw.get("toToken"), dst_token, chain_id)

    return SwapQuote(
        chain_id=chain_id,
        src_token=src_token,
        dst_token=resolved_dst,
        amount_in=amount_in,
        expected_amount_out=expected,
        tx=TxPayload(to=tx["to"], data=tx["data"], value=value, chain_id=chain_id),
        spender=tx["to"],
        raw=dict(raw),
    )
