"""
Transaction execution models and types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class TransactionType(str, Enum):
    """Types of transactions."""
    SWAP = "swap"
    BRIDGE = "bridge"
    TRANSFER = "transfer"
    APPROVE = "approve"
    WRAP = "wrap"


class TransactionStatus(str, Enum):
    """Transaction lifecycle status."""
    CONFIRMED = "confirmed"
    REVERTED = "reverted"


@dataclass
class GasEstimate:
    """Gas limit and price used for a transaction."""
    gas_limit: int
    gas_price_wei: int
    estimated_cost_wei: int = 0

    def __post_init__(self):
        if self.estimated_cost_wei == 0:
            self.estimated_cost_wei = self.gas_limit * self.gas_price_wei


@dataclass
class PreparedTransaction:
    """A transaction ready to be signed and broadcast."""
    tx_type: TransactionType
    chain_id: int
    from_address: str
    to_address: str
    data: str = "0x"                            # Encoded calldata (hex)
    value: int = 0                              # Wei to send
    gas_limit: Optional[int] = None             # Fixed limit; estimated when unset
    description: str = ""

    def call_object(self) -> Dict[str, Any]:
        """JSON-RPC call object for eth_estimateGas."""
        return {
            "from": self.from_address,
            "to": self.to_address,
            "data": self.data,
            "value": hex(self.value),
        }


@dataclass
class TransactionResult:
    """Result of a mined transaction."""
    tx_hash: str
    chain_id: int
    status: TransactionStatus = TransactionStatus.CONFIRMED
    gas: Optional[GasEstimate] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    receipt: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_success(self) -> bool:
        return self.status == TransactionStatus.CONFIRMED
