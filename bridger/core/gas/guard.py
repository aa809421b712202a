"""
Gas-Sufficiency Guard.

Makes sure the wallet holds enough native gas on the chain a cycle is about to
operate on. When it does not, a "gas rescue" wraps native ETH on the reserve
chain and bridges it to the deficient chain as native ETH.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Tuple

from eth_account.signers.local import LocalAccount

from ...providers.rpc import EvmRpcProvider
from ..bridge.chain_registry import ChainRegistry
from ..bridge.client import BridgeClient
from ..bridge.constants import NATIVE_PLACEHOLDER
from ..bridge.models import BridgeQuoteRequest, BridgeStatus
from ..errors import BridgerError
from ..execution.executor import TransactionExecutor

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]

WEI_PER_ETH = 10**18


class GasCheckStatus(str, Enum):
    OK = "ok"
    INSUFFICIENT = "insufficient"


@dataclass
class GasCheck:
    status: GasCheckStatus
    chain_id: int
    balance: Optional[int] = None
    reason: Optional[str] = None
    rescued: bool = False
    rescue_request_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == GasCheckStatus.OK


def eth_to_wei(amount: float) -> int:
    return int(Decimal(str(amount)) * WEI_PER_ETH)


class GasGuard:
    def __init__(
        self,
        rpc: EvmRpcProvider,
        executor: TransactionExecutor,
        bridge: BridgeClient,
        registry: ChainRegistry,
        *,
        reserve_chain_id: int = 8453,
        min_gas_wei: int = eth_to_wei(0.0005),
        rescue_amount_wei: int = eth_to_wei(0.001),
        fee_buffer_wei: int = eth_to_wei(0.0005),
        wait_seconds: float = 60.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.rpc = rpc
        self.executor = executor
        self.bridge = bridge
        self.registry = registry
        self.reserve_chain_id = reserve_chain_id
        self.min_gas_wei = min_gas_wei
        self.rescue_amount_wei = rescue_amount_wei
        self.fee_buffer_wei = fee_buffer_wei
        self.wait_seconds = wait_seconds
        self._sleep = sleep

    def _insufficient(self, chain_id: int, balance: Optional[int], reason: str, **extra: Any) -> GasCheck:
        logger.warning("Gas insufficient on chain %s: %s", chain_id, reason)
        return GasCheck(
            status=GasCheckStatus.INSUFFICIENT,
            chain_id=chain_id,
            balance=balance,
            reason=reason,
            **extra,
        )

    async def ensure_gas(self, account: LocalAccount, chain_id: int) -> GasCheck:
        """Return OK when ``chain_id`` has enough native gas, rescuing it from the reserve chain if possible."""
        try:
            balance = await self.rpc.get_balance(chain_id, account.address)
        except BridgerError as exc:
            return self._insufficient(chain_id, None, f"native balance unavailable: {exc}")

        if balance >= self.min_gas_wei:
            return GasCheck(status=GasCheckStatus.OK, chain_id=chain_id, balance=balance)

        if chain_id == self.reserve_chain_id:
            return self._insufficient(chain_id, balance, "reserve chain itself is below the gas minimum")

        try:
            reserve_balance = await self.rpc.get_balance(self.reserve_chain_id, account.address)
        except BridgerError as exc:
            return self._insufficient(chain_id, balance, f"reserve balance unavailable: {exc}")

        required = self.rescue_amount_wei + self.fee_buffer_wei
        if reserve_balance < required:
            return self._insufficient(
                chain_id,
                balance,
                f"reserve chain holds {reserve_balance} wei, rescue needs {required} wei",
            )

        try:
            request_id, final_status = await self._rescue(account, chain_id)
        except BridgerError as exc:
            return self._insufficient(chain_id, balance, f"gas rescue failed: {exc}")

        if final_status is not None and not (final_status.is_completed or final_status.is_pending):
            return self._insufficient(
                chain_id,
                balance,
                f"gas rescue bridge ended with status {final_status.status}",
                rescue_request_id=request_id,
            )

        try:
            balance = await self.rpc.get_balance(chain_id, account.address)
        except BridgerError as exc:
            return self._insufficient(chain_id, None, f"native balance unavailable after rescue: {exc}", rescue_request_id=request_id)

        if balance >= self.min_gas_wei:
            logger.info("Gas rescue topped up chain %s (request %s)", chain_id, request_id)
            return GasCheck(
                status=GasCheckStatus.OK,
                chain_id=chain_id,
                balance=balance,
                rescued=True,
                rescue_request_id=request_id,
            )
        return self._insufficient(
            chain_id,
            balance,
            "gas rescue has not landed yet",
            rescue_request_id=request_id,
        )

    async def _rescue(self, account: LocalAccount, chain_id: int) -> Tuple[Optional[str], Optional[BridgeStatus]]:
        reserve = self.reserve_chain_id
        weth = self.registry.token_address(reserve, "WETH")
        logger.info(
            "Starting gas rescue: %s wei from chain %s to chain %s",
            self.rescue_amount_wei,
            reserve,
            chain_id,
        )

        await self.executor.wrap_native(account, reserve, weth, self.rescue_amount_wei)

        quote = await self.bridge.quote(
            BridgeQuoteRequest(
                user=account.address,
                origin_chain_id=reserve,
                destination_chain_id=chain_id,
                origin_currency=weth,
                amount=self.rescue_amount_wei,
                destination_currency=NATIVE_PLACEHOLDER,
            )
        )
        deposit = self.bridge.deposit_payload(quote)
        await self.executor.approve_if_needed(account, reserve, weth, deposit.to)
        execution = await self.bridge.execute(account, quote)
        request_id = execution.request_id
        if not request_id:
            return None, None

        status = await self._status(request_id)
        logger.info("Gas rescue %s status: %s", request_id, status.status if status else "unavailable")

        await self._sleep(self.wait_seconds)

        status = await self._status(request_id)
        logger.info("Gas rescue %s status after wait: %s", request_id, status.status if status else "unavailable")
        return request_id, status

    async def _status(self, request_id: str) -> Optional[BridgeStatus]:
        try:
            return await self.bridge.status(request_id)
        except BridgerError as exc:
            logger.warning("Gas rescue status check failed for %s: %s", request_id, exc)
            return None
