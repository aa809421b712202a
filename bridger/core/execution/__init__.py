"""
Transaction Execution Layer

- TransactionExecutor: gas ceiling check, estimation, signing, submission, receipt wait
- TransactionBuilder: calldata for approvals, transfers, WETH deposits and API payloads
"""

from .executor import TransactionExecutor
from .models import GasEstimate, PreparedTransaction, TransactionResult, TransactionStatus, TransactionType
from .tx_builder import MAX_UINT256, TransactionBuilder

__all__ = [
    "TransactionExecutor",
    "TransactionBuilder",
    "GasEstimate",
    "PreparedTransaction",
    "TransactionResult",
    "TransactionStatus",
    "TransactionType",
    "MAX_UINT256",
]
