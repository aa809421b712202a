"""
Fund consolidation.

Sweeps every tracked token and the spendable native balance of each wallet,
on every supported chain, to a single destination address.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from eth_account.signers.local import LocalAccount

from ..core.bridge.chain_registry import ChainRegistry
from ..core.bridge.constants import TRACKED_SYMBOLS
from ..core.errors import BridgerError
from ..core.execution.executor import TransactionExecutor
from ..core.execution.tx_builder import NATIVE_TRANSFER_GAS
from ..providers.rpc import EvmRpcProvider
from .balances import BalanceReader
from .evm import format_units
from .wallets import WalletRecord

logger = logging.getLogger(__name__)

# Native remainders at or below 0.00001 ETH are not worth a transfer
MIN_NATIVE_WITHDRAW_WEI = 10**13


@dataclass
class WithdrawReport:
    success_count: int = 0
    failure_count: int = 0
    tx_hashes: List[str] = field(default_factory=list)

    def merge(self, other: "WithdrawReport") -> None:
        self.success_count += other.success_count
        self.failure_count += other.failure_count
        self.tx_hashes.extend(other.tx_hashes)


class WithdrawService:
    def __init__(
        self,
        rpc: EvmRpcProvider,
        executor: TransactionExecutor,
        balances: BalanceReader,
        registry: ChainRegistry,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.rpc = rpc
        self.executor = executor
        self.balances = balances
        self.registry = registry
        self._logger = logger or logging.getLogger(__name__)

    async def withdraw_wallet(self, wallet: WalletRecord, destination: str) -> WithdrawReport:
        account = wallet.account()
        report = WithdrawReport()
        for chain_id in self.registry.ordered_chain_ids():
            for symbol in TRACKED_SYMBOLS:
                await self._withdraw_token(account, chain_id, symbol, destination, report)
            await self._withdraw_native(account, chain_id, destination, report)
        return report

    async def withdraw_all(self, wallets: Sequence[WalletRecord], destination: str) -> WithdrawReport:
        total = WithdrawReport()
        for wallet in wallets:
            self._logger.info("Withdrawing from %s to %s", wallet.address, destination)
            total.merge(await self.withdraw_wallet(wallet, destination))
        self._logger.info(
            "Withdrawal finished: %d succeeded, %d failed",
            total.success_count,
            total.failure_count,
        )
        return total

    async def _withdraw_token(
        self,
        account: LocalAccount,
        chain_id: int,
        symbol: str,
        destination: str,
        report: WithdrawReport,
    ) -> None:
        balance = await self.balances.token_balance(chain_id, symbol, account.address)
        if not balance.is_available or balance.raw <= 0:
            return
        try:
            result = await self.executor.transfer_erc20(account, chain_id, balance.address, destination, balance.raw)
        except BridgerError as exc:
            self._logger.error(
                "Failed to withdraw %s %s on %s: %s",
                balance.formatted,
                symbol,
                self.registry.chain_name(chain_id),
                exc,
            )
            report.failure_count += 1
            return
        self._logger.info("Withdrew %s %s on %s", balance.formatted, symbol, self.registry.chain_name(chain_id))
        report.success_count += 1
        report.tx_hashes.append(result.tx_hash)

    async def _withdraw_native(
        self,
        account: LocalAccount,
        chain_id: int,
        destination: str,
        report: WithdrawReport,
    ) -> None:
        try:
            balance = await self.rpc.get_balance(chain_id, account.address)
            gas_price = await self.rpc.get_gas_price(chain_id)
        except BridgerError as exc:
            self._logger.error("Native balance unavailable on %s: %s", self.registry.chain_name(chain_id), exc)
            report.failure_count += 1
            return

        # Keep twice the cost of a plain transfer for fees
        amount = balance - 2 * gas_price * NATIVE_TRANSFER_GAS
        if amount <= MIN_NATIVE_WITHDRAW_WEI:
            return

        try:
            result = await self.executor.transfer_native(account, chain_id, destination, amount)
        except BridgerError as exc:
            self._logger.error(
                "Failed to withdraw %s ETH on %s: %s",
                format_units(amount, 18),
                self.registry.chain_name(chain_id),
                exc,
            )
            report.failure_count += 1
            return
        self._logger.info("Withdrew %s ETH on %s", format_units(amount, 18), self.registry.chain_name(chain_id))
        report.success_count += 1
        report.tx_hashes.append(result.tx_hash)
