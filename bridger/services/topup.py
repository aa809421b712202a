"""
Wallet funding.

A funding wallet on the reserve chain swaps USDC into native ETH and WETH with
the swap receiver set to each target wallet, so every wallet starts with gas
and a WETH balance the cycle can pick up.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from eth_account.signers.local import LocalAccount

from ..core.bridge.chain_registry import ChainRegistry
from ..core.bridge.constants import ONEINCH_NATIVE_PLACEHOLDER, TOKEN_DECIMALS
from ..core.errors import BridgerError, InsufficientFundsError
from ..core.swap.client import SwapClient
from ..core.swap.models import TokenRef
from .evm import Erc20Reader, format_units, to_raw_units

logger = logging.getLogger(__name__)


@dataclass
class FundingCheck:
    required: int
    available: int

    @property
    def sufficient(self) -> bool:
        return self.available >= self.required


@dataclass
class TopUpReport:
    success_count: int = 0
    failure_count: int = 0
    tx_hashes: List[str] = field(default_factory=list)


class TopUpService:
    def __init__(
        self,
        swap: SwapClient,
        erc20: Erc20Reader,
        registry: ChainRegistry,
        *,
        chain_id: int = 8453,
        usdc_per_wallet: float = 2.0,
    ) -> None:
        self.swap = swap
        self.erc20 = erc20
        self.registry = registry
        self.chain_id = chain_id
        self.per_wallet_raw = to_raw_units(usdc_per_wallet, TOKEN_DECIMALS["USDC"])

    def _usdc(self) -> TokenRef:
        return TokenRef(
            address=self.registry.token_address(self.chain_id, "USDC"),
            symbol="USDC",
            decimals=TOKEN_DECIMALS["USDC"],
        )

    def _targets(self) -> List[TokenRef]:
        native = self.registry.describe(self.chain_id)
        return [
            TokenRef(address=ONEINCH_NATIVE_PLACEHOLDER, symbol=native.native_symbol, decimals=native.native_decimals),
            TokenRef(
                address=self.registry.token_address(self.chain_id, "WETH"),
                symbol="WETH",
                decimals=TOKEN_DECIMALS["WETH"],
            ),
        ]

    async def check_funding(self, funder: str, wallet_count: int) -> FundingCheck:
        available = await self.erc20.balance_of(self.chain_id, self._usdc().address, funder)
        return FundingCheck(required=self.per_wallet_raw * wallet_count, available=available)

    async def top_up_wallet(self, funder: LocalAccount, address: str) -> TopUpReport:
        """Swap half the per-wallet budget to native ETH and half to WETH for ``address``."""
        report = TopUpReport()
        usdc = self._usdc()
        half = self.per_wallet_raw // 2
        amounts = [half, self.per_wallet_raw - half]

        for target, amount in zip(self._targets(), amounts):
            try:
                quote = await self.swap.quote(funder.address, address, usdc, target, amount, self.chain_id)
                await self.swap.approve_router(funder, quote)
                execution = await self.swap.execute(funder, quote)
            except BridgerError as exc:
                logger.error(
                    "Top-up swap USDC -> %s for %s failed: %s",
                    target.symbol,
                    address,
                    exc,
                )
                report.failure_count += 1
                continue
            logger.info(
                "Sent %s USDC as %s to %s (%s)",
                format_units(amount, usdc.decimals),
                target.symbol,
                address,
                execution.tx_hash,
            )
            report.success_count += 1
            report.tx_hashes.append(execution.tx_hash)
        return report

    async def top_up_all(
        self,
        funder: LocalAccount,
        addresses: Sequence[str],
        *,
        check: Optional[FundingCheck] = None,
    ) -> TopUpReport:
        funding = check or await self.check_funding(funder.address, len(addresses))
        if not funding.sufficient:
            raise InsufficientFundsError(
                f"Funding wallet holds {format_units(funding.available, 6)} USDC, "
                f"{format_units(funding.required, 6)} USDC required",
                chain_id=self.chain_id,
            )

        total = TopUpReport()
        for address in addresses:
            report = await self.top_up_wallet(funder, address)
            total.success_count += report.success_count
            total.failure_count += report.failure_count
            total.tx_hashes.extend(report.tx_hashes)
        logger.info("Top-up finished: %d succeeded, %d failed", total.success_count, total.failure_count)
        return total
