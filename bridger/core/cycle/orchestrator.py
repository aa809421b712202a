"""
Cycle Orchestrator

Drives one bridge cycle for one wallet:

    BALANCE_CHECK -> SELECT -> GAS_GUARD -> APPROVE_FOR_SWAP -> SWAP
        -> APPROVE_FOR_BRIDGE -> BRIDGE -> STATUS_POLL -> COMPLETED

Skippable conditions end the cycle in SKIPPED, any other failure in FAILED.
Earlier steps are never rolled back.
"""

from __future__ import annotations

import logging
import random
import uuid
from typing import Optional

import structlog
from eth_account.signers.local import LocalAccount

from ...services.balances import BalanceReader
from ...services.wallets import WalletRecord
from ..bridge.chain_registry import ChainRegistry
from ..bridge.client import BridgeClient
from ..bridge.constants import TOKEN_DECIMALS, is_native_address
from ..bridge.models import BridgeQuoteRequest
from ..errors import BridgerError, InsufficientGasError, SkippableError, classify_error
from ..execution.executor import TransactionExecutor
from ..gas.guard import GasGuard
from ..selection.policy import BridgeCandidate, opposite_symbol, pick_destination, select_candidate
from ..swap.client import SwapClient
from ..swap.models import SwapExecution, TokenRef
from .models import CycleOutcome, CycleState


logger = logging.getLogger(__name__)


class BridgeCycle:
    """One balance-check -> swap -> bridge pass for a wallet."""

    def __init__(
        self,
        balances: BalanceReader,
        swap: SwapClient,
        bridge: BridgeClient,
        gas_guard: GasGuard,
        executor: TransactionExecutor,
        registry: ChainRegistry,
        *,
        rng: Optional[random.Random] = None,
        swap_amount_percent: int = 100,
    ) -> None:
        self.balances = balances
        self.swap = swap
        self.bridge = bridge
        self.gas_guard = gas_guard
        self.executor = executor
        self.registry = registry
        self.rng = rng or random.Random()
        self.swap_amount_percent = swap_amount_percent

    async def run(self, wallet: WalletRecord) -> CycleOutcome:
        outcome = CycleOutcome(cycle_id=uuid.uuid4().hex[:12], wallet=wallet.address)
        structlog.contextvars.bind_contextvars(cycle_id=outcome.cycle_id, wallet=wallet.address)
        try:
            await self._run(wallet.account(), outcome)
        except SkippableError as exc:
            self._skip(outcome, str(exc))
        except Exception as exc:
            self._fail(outcome, exc)
        finally:
            structlog.contextvars.unbind_contextvars("cycle_id", "wallet")
        return outcome

    def _skip(self, outcome: CycleOutcome, reason: str) -> None:
        logger.info("Cycle skipped at %s: %s", outcome.state.value, reason)
        outcome.reason = reason
        outcome.advance(CycleState.SKIPPED)

    def _fail(self, outcome: CycleOutcome, exc: Exception) -> None:
        outcome.failed_step = outcome.state
        outcome.reason = str(exc) or exc.__class__.__name__
        category = classify_error(exc)
        if isinstance(exc, BridgerError):
            logger.error("Cycle failed at %s (%s): %s", outcome.state.value, category.value, outcome.reason)
        else:
            logger.error("Cycle failed at %s (%s): %s", outcome.state.value, category.value, outcome.reason, exc_info=True)
        outcome.advance(CycleState.FAILED)

    async def _run(self, account: LocalAccount, outcome: CycleOutcome) -> None:
        address = account.address

        # BALANCE_CHECK
        snapshot = await self.balances.snapshot(address)
        outcome.advance(CycleState.SELECT)

        # SELECT
        candidate = select_candidate(snapshot)
        if candidate is None:
            self._skip(outcome, "no tracked balance above its minimum on any chain")
            return
        destination = pick_destination(candidate.chain_id, self.rng, self.registry.ordered_chain_ids())
        outcome.candidate = candidate
        outcome.destination_chain_id = destination
        logger.info(
            "Selected %s %s on %s, bridging to %s",
            candidate.balance,
            candidate.symbol,
            self.registry.chain_name(candidate.chain_id),
            self.registry.chain_name(destination),
        )
        outcome.advance(CycleState.GAS_GUARD)

        # GAS_GUARD
        gas = await self.gas_guard.ensure_gas(account, candidate.chain_id)
        if not gas.ok:
            raise InsufficientGasError(gas.reason or "insufficient gas", chain_id=candidate.chain_id)
        outcome.advance(CycleState.APPROVE_FOR_SWAP)

        # APPROVE_FOR_SWAP
        swap_amount = candidate.balance * self.swap_amount_percent // 100
        quote = await self.swap.quote(
            address,
            address,
            self._token_ref(candidate.chain_id, candidate.symbol, candidate.token_address, candidate.decimals),
            self._token_ref(candidate.chain_id, candidate.target_symbol),
            swap_amount,
            candidate.chain_id,
        )
        await self.swap.approve_router(account, quote)
        outcome.advance(CycleState.SWAP)

        # SWAP
        swapped = await self.swap.execute(account, quote)
        outcome.swap_tx_hash = swapped.tx_hash
        outcome.advance(CycleState.APPROVE_FOR_BRIDGE)

        # APPROVE_FOR_BRIDGE
        amount = await self._bridge_amount(address, candidate, swapped)
        if amount <= 0:
            raise BridgerError("swap produced no output to bridge", chain_id=candidate.chain_id)
        out_symbol = self.registry.symbol_for(candidate.chain_id, swapped.output_token.address) or swapped.output_token.symbol
        final_symbol = opposite_symbol(out_symbol)
        bridge_quote = await self.bridge.quote(
            BridgeQuoteRequest(
                user=address,
                origin_chain_id=candidate.chain_id,
                destination_chain_id=destination,
                origin_currency=swapped.output_token.address,
                amount=amount,
                symbol=out_symbol,
                target_symbol=final_symbol,
            )
        )
        if not is_native_address(swapped.output_token.address):
            deposit = self.bridge.deposit_payload(bridge_quote)
            await self.executor.approve_if_needed(
                account,
                candidate.chain_id,
                swapped.output_token.address,
                deposit.to,
            )
        outcome.advance(CycleState.BRIDGE)

        # BRIDGE
        execution = await self.bridge.execute(account, bridge_quote)
        outcome.bridged_amount = amount
        outcome.bridge_tx_hash = execution.tx_hash
        outcome.request_id = execution.request_id
        outcome.final_symbol = final_symbol
        outcome.advance(CycleState.STATUS_POLL)

        # STATUS_POLL
        if execution.request_id:
            try:
                status = await self.bridge.status(execution.request_id)
                outcome.bridge_status = status.status
                logger.info("Bridge %s status: %s", execution.request_id, status.status)
            except Exception as exc:
                logger.warning("Bridge status check failed for %s: %s", execution.request_id, exc)
        outcome.advance(CycleState.COMPLETED)
        logger.info(
            "Cycle completed: %s on %s -> %s on %s",
            candidate.symbol,
            self.registry.chain_name(candidate.chain_id),
            final_symbol,
            self.registry.chain_name(destination),
        )

    def _token_ref(
        self,
        chain_id: int,
        symbol: str,
        address: Optional[str] = None,
        decimals: Optional[int] = None,
    ) -> TokenRef:
        return TokenRef(
            address=address or self.registry.token_address(chain_id, symbol),
            symbol=symbol,
            decimals=decimals if decimals is not None else TOKEN_DECIMALS.get(symbol, 18),
        )

    async def _bridge_amount(self, owner: str, candidate: BridgeCandidate, swapped: SwapExecution) -> int:
        """Bridge the expected swap output, capped at the post-swap balance when it can be read."""
        expected = swapped.output_amount
        token = swapped.output_token.address
        if is_native_address(token):
            return expected
        try:
            actual = await self.balances.erc20.balance_of(candidate.chain_id, token, owner)
        except (BridgerError, ValueError) as exc:
            logger.warning("Post-swap balance read failed, using quoted output: %s", exc)
            return expected
        if actual < expected:
            logger.info("Post-swap balance %s below quoted output %s", actual, expected)
        return min(expected, actual)
