"""Single-chain swaps through the 1inch aggregator."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from eth_account.signers.local import LocalAccount

from ...providers.oneinch import OneInchProvider
from ..bridge.constants import is_native_address
from ..execution.executor import TransactionExecutor
from ..execution.models import TransactionResult, TransactionType
from ..execution.tx_builder import TransactionBuilder
from .models import SwapExecution, SwapQuote, TokenRef, normalize_swap_response


logger = logging.getLogger(__name__)


class SwapClient:
    def __init__(
        self,
        provider: OneInchProvider,
        executor: TransactionExecutor,
        *,
        slippage_percent: float = 0.5,
        fee_percent: float = 0.0,
        referrer: str = "",
    ) -> None:
        self.provider = provider
        self.executor = executor
        self.slippage_percent = slippage_percent
        self.fee_percent = fee_percent
        self.referrer = referrer

    def _params(
        self,
        account: str,
        receiver: str,
        from_token: TokenRef,
        to_token: TokenRef,
        amount: int,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "src": from_token.address,
            "dst": to_token.address,
            "amount": str(amount),
            "from": account,
            "receiver": receiver,
            "slippage": self.slippage_percent,
            "allowPartialFill": "false",
            "disableEstimate": "true",
        }
        if self.fee_percent:
            params["fee"] = self.fee_percent
        if self.referrer:
            params["referrer"] = self.referrer
        return params

    async def quote(
        self,
        account: str,
        receiver: str,
        from_token: TokenRef,
        to_token: TokenRef,
        amount: int,
        chain_id: int,
    ) -> SwapQuote:
        """Fetch a fresh executable swap quote. Quotes are never cached."""
        raw = await self.provider.swap(chain_id, self._params(account, receiver, from_token, to_token, amount))
        quote = normalize_swap_response(
            raw,
            chain_id=chain_id,
            src_token=from_token,
            dst_token=to_token,
            amount_in=amount,
        )
        logger.info(
            "Swap quote on chain %s: %s %s -> %s %s",
            chain_id,
            amount,
            from_token.symbol,
            quote.expected_amount_out,
            quote.dst_token.symbol,
        )
        return quote

    async def approve_router(self, account: LocalAccount, quote: SwapQuote) -> Optional[TransactionResult]:
        """Approve the quote's router for the input token. Native input needs no approval."""
        if is_native_address(quote.src_token.address):
            return None
        return await self.executor.approve_if_needed(
            account,
            quote.chain_id,
            quote.src_token.address,
            quote.spender,
        )

    async def execute(
        self,
        account: LocalAccount,
        quote: SwapQuote,
        gas_limit: Optional[int] = None,
    ) -> SwapExecution:
        """Submit the swap. Gas limit is ``gas_limit`` when given, else estimate plus 20%."""
        tx = TransactionBuilder.build_from_payload(
            TransactionType.SWAP,
            chain_id=quote.chain_id,
            from_address=account.address,
            to_address=quote.tx.to,
            data=quote.tx.data,
            value=quote.tx.value,
            gas_limit=gas_limit,
            description=f"Swap {quote.src_token.symbol} -> {quote.dst_token.symbol}",
        )
        result = await self.executor.send(account, tx)
        return SwapExecution(
            success=result.is_success,
            tx_hash=result.tx_hash,
            output_amount=quote.expected_amount_out,
            output_token=quote.dst_token,
        )
