"""Cross-chain transfers through the Relay bridge aggregator."""

from __future__ import annotations

import logging
from typing import Any, Dict

from eth_account.signers.local import LocalAccount

from ...providers.relay import RelayProvider
from ..errors import MalformedQuoteError
from ..execution.executor import TransactionExecutor
from ..execution.models import TransactionType
from ..execution.tx_builder import TransactionBuilder
from ..swap.models import TxPayload
from .chain_registry import ChainRegistry
from .models import (
    BridgeExecution,
    BridgeQuote,
    BridgeQuoteRequest,
    BridgeStatus,
    BridgeStep,
    normalize_bridge_quote,
)


logger = logging.getLogger(__name__)

DEPOSIT_STEP_ID = "deposit"


def slippage_to_bps(percent: float) -> str:
    """Relay expects slippage in basis points, as a string (0.5% -> "50")."""
    return str(round(percent * 100))


class BridgeClient:
    def __init__(
        self,
        provider: RelayProvider,
        executor: TransactionExecutor,
        registry: ChainRegistry,
        *,
        slippage_percent: float = 0.5,
        referrer: str = "relay.link",
    ) -> None:
        self.provider = provider
        self.executor = executor
        self.registry = registry
        self.slippage_percent = slippage_percent
        self.referrer = referrer

    def resolve_destination_currency(self, request: BridgeQuoteRequest) -> str:
        if request.destination_currency:
            return request.destination_currency
        symbol = request.target_symbol or request.symbol
        if not symbol:
            raise MalformedQuoteError(
                "Bridge request names no destination currency",
                chain_id=request.destination_chain_id,
            )
        return self.registry.token_address(request.destination_chain_id, symbol)

    def _payload(self, request: BridgeQuoteRequest, destination_currency: str) -> Dict[str, Any]:
        return {
            "user": request.user,
            "recipient": request.recipient or request.user,
            "originChainId": request.origin_chain_id,
            "destinationChainId": request.destination_chain_id,
            "originCurrency": request.origin_currency,
            "destinationCurrency": destination_currency,
            "amount": str(request.amount),
            "tradeType": "EXACT_INPUT",
            "referrer": self.referrer,
            "slippageTolerance": slippage_to_bps(self.slippage_percent),
        }

    async def quote(self, request: BridgeQuoteRequest) -> BridgeQuote:
        """Request a fresh Relay quote. Quotes are never cached."""
        destination_currency = self.resolve_destination_currency(request)
        raw = await self.provider.quote(self._payload(request, destination_currency))
        quote = normalize_bridge_quote(
            raw,
            origin_chain_id=request.origin_chain_id,
            destination_chain_id=request.destination_chain_id,
            origin_currency=request.origin_currency,
            destination_currency=destination_currency,
            amount=request.amount,
        )
        logger.info(
            "Bridge quote %s -> %s for %s (request %s, eta %ss)",
            request.origin_chain_id,
            request.destination_chain_id,
            request.amount,
            quote.request_id,
            quote.time_estimate_seconds,
        )
        return quote

    def deposit_step(self, quote: BridgeQuote) -> BridgeStep:
        step = quote.step(DEPOSIT_STEP_ID)
        if step is None:
            raise MalformedQuoteError("Bridge quote has no deposit step", chain_id=quote.origin_chain_id)
        if not step.items or step.items[0].payload is None:
            raise MalformedQuoteError("Bridge deposit step has no transaction", chain_id=quote.origin_chain_id)
        return step

    def deposit_payload(self, quote: BridgeQuote) -> TxPayload:
        return self.deposit_step(quote).items[0].payload

    async def execute(self, account: LocalAccount, quote: BridgeQuote) -> BridgeExecution:
        """Submit the deposit transaction on the chain named in its payload."""
        step = self.deposit_step(quote)
        payload = step.items[0].payload
        chain_id = payload.chain_id or quote.origin_chain_id

        tx = TransactionBuilder.build_from_payload(
            TransactionType.BRIDGE,
            chain_id=chain_id,
            from_address=account.address,
            to_address=payload.to,
            data=payload.data,
            value=payload.value,
            description=step.description or "Bridge deposit",
        )
        result = await self.executor.send(account, tx)
        return BridgeExecution(
            tx_hash=result.tx_hash,
            request_id=step.request_id or quote.request_id,
            chain_id=chain_id,
        )

    async def status(self, request_id: str) -> BridgeStatus:
        raw = await self.provider.get_status(request_id)
        status = raw.get("status") if isinstance(raw, dict) else None
        return BridgeStatus(request_id=request_id, status=str(status or "unknown"), raw=raw if isinstance(raw, dict) else {})
