"""Scheduling loop: pick a wallet, run a cycle, sleep a random interval, repeat."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from ...services.wallets import WalletRecord, active_wallets, pick_active
from ..errors import NoActiveWalletsError
from .models import CycleOutcome, CycleState
from .orchestrator import BridgeCycle

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]
StopCondition = Callable[[], bool]


@dataclass
class RunSummary:
    cycles: int = 0
    by_state: Dict[CycleState, int] = field(default_factory=dict)
    last_outcome: Optional[CycleOutcome] = None

    def record(self, outcome: CycleOutcome) -> None:
        self.cycles += 1
        self.by_state[outcome.state] = self.by_state.get(outcome.state, 0) + 1
        self.last_outcome = outcome


class CycleRunner:
    def __init__(
        self,
        cycle: BridgeCycle,
        wallets: Sequence[WalletRecord],
        *,
        interval_min_minutes: float = 1.0,
        interval_max_minutes: float = 2.0,
        rng: Optional[random.Random] = None,
        sleep: Sleep = asyncio.sleep,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if interval_max_minutes < interval_min_minutes:
            raise ValueError("interval_max_minutes must be >= interval_min_minutes")
        self.cycle = cycle
        self.wallets = list(wallets)
        self.interval_min_minutes = interval_min_minutes
        self.interval_max_minutes = interval_max_minutes
        self.rng = rng or random.Random()
        self._sleep = sleep
        self._logger = logger or logging.getLogger(__name__)

    def next_delay_seconds(self) -> float:
        return self.rng.uniform(self.interval_min_minutes * 60, self.interval_max_minutes * 60)

    async def run(
        self,
        *,
        max_cycles: Optional[int] = None,
        should_stop: Optional[StopCondition] = None,
    ) -> RunSummary:
        """Run cycles until ``max_cycles`` is reached or ``should_stop`` returns true."""
        if not active_wallets(self.wallets):
            raise NoActiveWalletsError()

        summary = RunSummary()
        while True:
            if max_cycles is not None and summary.cycles >= max_cycles:
                break
            if should_stop is not None and should_stop():
                break

            wallet = pick_active(self.wallets, self.rng)
            self._logger.info("Starting cycle %d with wallet %s", summary.cycles + 1, wallet.address)
            try:
                outcome = await self.cycle.run(wallet)
            except Exception as exc:
                self._logger.warning("Cycle raised unexpectedly: %s", exc, exc_info=True)
                outcome = CycleOutcome(cycle_id="", wallet=wallet.address, reason=str(exc))
                outcome.failed_step = outcome.state
                outcome.advance(CycleState.FAILED)
            summary.record(outcome)

            if max_cycles is not None and summary.cycles >= max_cycles:
                break
            if should_stop is not None and should_stop():
                break

            delay = self.next_delay_seconds()
            self._logger.info("Next cycle in %.0f seconds", delay)
            await self._sleep(delay)

        self._logger.info(
            "Runner stopped after %d cycles (%s)",
            summary.cycles,
            ", ".join(f"{state.value}={count}" for state, count in summary.by_state.items()),
        )
        return summary
