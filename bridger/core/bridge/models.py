"""Typed models used by the bridge subsystem, plus the Relay quote adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..errors import MalformedQuoteError
from ..execution.tx_builder import parse_quantity
from ..swap.models import TxPayload


PENDING_STATUSES = frozenset({"pending", "waiting", "created", "submitted", "delayed", "unknown"})


@dataclass
class BridgeQuoteRequest:
    """Parameters for a Relay quote.

    ``destination_currency`` wins when given; otherwise ``target_symbol`` is
    resolved on the destination chain, falling back to ``symbol``.
    """

    user: str
    origin_chain_id: int
    destination_chain_id: int
    origin_currency: str
    amount: int
    symbol: Optional[str] = None
    target_symbol: Optional[str] = None
    destination_currency: Optional[str] = None
    recipient: Optional[str] = None


@dataclass
class BridgeStepItem:
    status: Optional[str]
    payload: Optional[TxPayload]


@dataclass
class BridgeStep:
    id: str
    action: Optional[str] = None
    description: Optional[str] = None
    request_id: Optional[str] = None
    items: List[BridgeStepItem] = field(default_factory=list)


@dataclass
class BridgeQuote:
    origin_chain_id: int
    destination_chain_id: int
    origin_currency: str
    destination_currency: str
    amount: int
    steps: List[BridgeStep]
    request_id: Optional[str] = None
    expected_amount_out: Optional[int] = None
    time_estimate_seconds: Optional[float] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    def step(self, step_id: str) -> Optional[BridgeStep]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None


@dataclass
class BridgeExecution:
    tx_hash: str
    request_id: Optional[str]
    chain_id: int


@dataclass
class BridgeStatus:
    request_id: str
    status: str
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_completed(self) -> bool:
        return self.status.lower() in {"completed", "success"}

    @property
    def is_pending(self) -> bool:
        return self.status.lower() in PENDING_STATUSES


def _payload_from_item(data: Any) -> Optional[TxPayload]:
    if not isinstance(data, Mapping) or not data.get("to"):
        return None
    if not isinstance(data["to"], str):
        raise TypeError(f"payload target is not an address: {data['to']!r}")
    chain_id = data.get("chainId")
    return TxPayload(
        to=data["to"],
        data=data.get("data") or "0x",
        value=parse_quantity(data.get("value", 0)),
        chain_id=int(chain_id) if chain_id is not None else None,
    )


def normalize_bridge_quote(
    raw: Mapping[str, Any],
    *,
    origin_chain_id: int,
    destination_chain_id: int,
    origin_currency: str,
    destination_currency: str,
    amount: int,
) -> BridgeQuote:
    """Map a Relay ``/quote`` response onto ``BridgeQuote``."""
    if not isinstance(raw, Mapping):
        raise MalformedQuoteError("Bridge quote is not an object", chain_id=origin_chain_id)

    raw_steps = raw.get("steps")
    if not isinstance(raw_steps, list):
        raise MalformedQuoteError("Bridge quote has no steps", chain_id=origin_chain_id)

    steps: List[BridgeStep] = []
    for raw_step in raw_steps:
        if not isinstance(raw_step, Mapping):
            continue
        items = []
        for item in raw_step.get("items") or []:
            if not isinstance(item, Mapping):
                continue
            try:
                payload = _payload_from_item(item.get("data"))
            except (TypeError, ValueError) as exc:
                raise MalformedQuoteError(f"Bridge step has invalid payload: {exc}", chain_id=origin_chain_id) from exc
            items.append(BridgeStepItem(status=item.get("status"), payload=payload))
        steps.append(
            BridgeStep(
                id=str(raw_step.get("id") or ""),
                action=raw_step.get("action"),
                description=raw_step.get("description"),
                request_id=raw_step.get("requestId"),
                items=items,
            )
        )

    request_id = steps[0].request_id if steps else None
    if not request_id:
        request_id = raw.get("requestId") or raw.get("id")

    details = raw.get("details") or {}
    if not isinstance(details, Mapping):
        raise MalformedQuoteError("Bridge quote details are not an object", chain_id=origin_chain_id)
    currency_out = details.get("currencyOut") or {}
    if not isinstance(currency_out, Mapping):
        raise MalformedQuoteError("Bridge quote currencyOut is not an object", chain_id=origin_chain_id)
    expected_out = None
    if currency_out.get("amount") is not None:
        try:
            expected_out = parse_quantity(currency_out["amount"])
        except (TypeError, ValueError):
            expected_out = None

    time_estimate = details.get("timeEstimate")
    eta_seconds = None
    if time_estimate is not None:
        try:
            eta_seconds = float(time_estimate)
        except (TypeError, ValueError):
            eta_seconds = None

    return BridgeQuote(
        origin_chain_id=origin_chain_id,
        destination_chain_id=destination_chain_id,
        origin_currency=origin_currency,
        destination_currency=destination_currency,
        amount=amount,
        steps=steps,
        request_id=request_id,
        expected_amount_out=expected_out,
        time_estimate_seconds=eta_seconds,
        raw=dict(raw),
    )
