"""Cycle states, transitions and outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

from ..selection.policy import BridgeCandidate


class CycleState(str, Enum):
    BALANCE_CHECK = "balance_check"
    SELECT = "select"
    GAS_GUARD = "gas_guard"
    APPROVE_FOR_SWAP = "approve_for_swap"
    SWAP = "swap"
    APPROVE_FOR_BRIDGE = "approve_for_bridge"
    BRIDGE = "bridge"
    STATUS_POLL = "status_poll"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


TERMINAL_STATES: Set[CycleState] = {CycleState.COMPLETED, CycleState.SKIPPED, CycleState.FAILED}

# Valid forward transitions; any non-terminal state may also end in FAILED
TRANSITIONS: Dict[CycleState, Set[CycleState]] = {
    CycleState.BALANCE_CHECK: {CycleState.SELECT, CycleState.FAILED},
    CycleState.SELECT: {CycleState.GAS_GUARD, CycleState.SKIPPED, CycleState.FAILED},
    CycleState.GAS_GUARD: {CycleState.APPROVE_FOR_SWAP, CycleState.SKIPPED, CycleState.FAILED},
    CycleState.APPROVE_FOR_SWAP: {CycleState.SWAP, CycleState.SKIPPED, CycleState.FAILED},
    CycleState.SWAP: {CycleState.APPROVE_FOR_BRIDGE, CycleState.SKIPPED, CycleState.FAILED},
    CycleState.APPROVE_FOR_BRIDGE: {CycleState.BRIDGE, CycleState.SKIPPED, CycleState.FAILED},
    CycleState.BRIDGE: {CycleState.STATUS_POLL, CycleState.SKIPPED, CycleState.FAILED},
    CycleState.STATUS_POLL: {CycleState.COMPLETED},
    CycleState.COMPLETED: set(),
    CycleState.SKIPPED: set(),
    CycleState.FAILED: set(),
}


class InvalidTransitionError(Exception):
    def __init__(self, from_state: CycleState, to_state: CycleState) -> None:
        super().__init__(f"Invalid cycle transition {from_state.value} -> {to_state.value}")
        self.from_state = from_state
        self.to_state = to_state


@dataclass
class CycleOutcome:
    cycle_id: str
    wallet: str
    state: CycleState = CycleState.BALANCE_CHECK
    states: List[CycleState] = field(default_factory=lambda: [CycleState.BALANCE_CHECK])
    candidate: Optional[BridgeCandidate] = None
    destination_chain_id: Optional[int] = None
    failed_step: Optional[CycleState] = None
    reason: Optional[str] = None
    swap_tx_hash: Optional[str] = None
    bridged_amount: Optional[int] = None
    bridge_tx_hash: Optional[str] = None
    request_id: Optional[str] = None
    bridge_status: Optional[str] = None
    final_symbol: Optional[str] = None

    def advance(self, next_state: CycleState) -> None:
        if next_state not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(self.state, next_state)
        self.state = next_state
        self.states.append(next_state)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES
