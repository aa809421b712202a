"""Construct the clients used by the CLI from an explicit Settings object."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

import httpx

from .config import Settings
from .core.bridge.chain_registry import ChainRegistry
from .core.bridge.client import BridgeClient
from .core.cycle.orchestrator import BridgeCycle
from .core.execution.executor import TransactionExecutor
from .core.gas.guard import GasGuard, eth_to_wei
from .core.swap.client import SwapClient
from .providers.oneinch import OneInchProvider
from .providers.relay import RelayProvider
from .providers.rpc import EvmRpcProvider
from .services.balances import BalanceReader
from .services.topup import TopUpService
from .services.withdraw import WithdrawService


@dataclass
class Services:
    settings: Settings
    registry: ChainRegistry
    rpc: EvmRpcProvider
    executor: TransactionExecutor
    balances: BalanceReader
    bridge: BridgeClient
    gas_guard: GasGuard
    swap: Optional[SwapClient] = None

    def cycle(self, rng: Optional[random.Random] = None) -> BridgeCycle:
        self.settings.require_swap_credentials()
        return BridgeCycle(
            self.balances,
            self.swap,
            self.bridge,
            self.gas_guard,
            self.executor,
            self.registry,
            rng=rng,
            swap_amount_percent=self.settings.swap_amount_percent,
        )

    def withdraw(self) -> WithdrawService:
        return WithdrawService(self.rpc, self.executor, self.balances, self.registry)

    def topup(self) -> TopUpService:
        self.settings.require_swap_credentials()
        return TopUpService(
            self.swap,
            self.balances.erc20,
            self.registry,
            chain_id=self.settings.reserve_chain_id,
            usdc_per_wallet=self.settings.topup_usdc_per_wallet,
        )

    async def close(self) -> None:
        await self.rpc.close()


def build_services(
    settings: Settings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Services:
    registry = ChainRegistry.from_settings(settings)
    rpc = EvmRpcProvider(
        registry.rpc_urls(),
        timeout_s=settings.request_timeout_seconds,
        transport=transport,
    )
    executor = TransactionExecutor(
        rpc,
        max_gas_price_gwei=settings.max_gas_price_gwei,
        confirmation_timeout=settings.confirmation_timeout_seconds,
        poll_interval=settings.receipt_poll_interval_seconds,
    )
    relay = RelayProvider(
        base_url=settings.relay_base_url,
        timeout_s=settings.request_timeout_seconds,
        transport=transport,
    )
    bridge = BridgeClient(
        relay,
        executor,
        registry,
        slippage_percent=settings.slippage_tolerance,
        referrer=settings.relay_referrer,
    )
    gas_guard = GasGuard(
        rpc,
        executor,
        bridge,
        registry,
        reserve_chain_id=settings.reserve_chain_id,
        min_gas_wei=eth_to_wei(settings.min_gas_balance_eth),
        rescue_amount_wei=eth_to_wei(settings.gas_rescue_amount_eth),
        fee_buffer_wei=eth_to_wei(settings.gas_rescue_fee_buffer_eth),
        wait_seconds=settings.gas_rescue_wait_seconds,
    )

    swap = None
    if settings.has_oneinch_key:
        oneinch = OneInchProvider(
            api_key=settings.oneinch_api_key,
            base_url=settings.oneinch_base_url,
            timeout_s=settings.request_timeout_seconds,
            transport=transport,
        )
        swap = SwapClient(
            oneinch,
            executor,
            slippage_percent=settings.slippage_tolerance,
            fee_percent=settings.oneinch_fee_percent,
            referrer=settings.oneinch_referrer,
        )

    return Services(
        settings=settings,
        registry=registry,
        rpc=rpc,
        executor=executor,
        balances=BalanceReader(rpc, registry),
        bridge=bridge,
        gas_guard=gas_guard,
        swap=swap,
    )
