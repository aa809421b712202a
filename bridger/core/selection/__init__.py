from .policy import (
    MIN_BRIDGE_AMOUNTS,
    TARGET_TOKENS,
    BridgeCandidate,
    opposite_symbol,
    pick_destination,
    select_candidate,
)

__all__ = [
    "MIN_BRIDGE_AMOUNTS",
    "TARGET_TOKENS",
    "BridgeCandidate",
    "opposite_symbol",
    "pick_destination",
    "select_candidate",
]
