"""
Error Classification

Every failure raised by bridger carries an ErrorCategory. The cycle orchestrator
uses the category to decide whether a cycle is skipped, failed, or whether the
whole process must stop.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

import httpx


class ErrorCategory(str, Enum):
    """Categories of errors for cycle decisions."""

    SKIPPABLE = "skippable"           # Conditions that will likely clear on a later cycle
    UPSTREAM_DATA = "upstream_data"   # Swap/bridge API failures and malformed responses
    ON_CHAIN = "on_chain"             # RPC, estimation, revert and confirmation failures
    FATAL = "fatal"                   # Startup problems; the process cannot continue
    VALIDATION = "validation"         # Unsupported chain or token lookups
    UNKNOWN = "unknown"


class BridgerError(Exception):
    """Base class for all bridger errors."""

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        chain_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.chain_id = chain_id
        self.details: Dict[str, Any] = details or {}


# Skippable
class SkippableError(BridgerError):
    category = ErrorCategory.SKIPPABLE


class GasPriceTooHighError(SkippableError):
    """Current gas price exceeds the configured ceiling."""

    def __init__(self, gas_price_wei: int, ceiling_wei: int, *, chain_id: Optional[int] = None) -> None:
        super().__init__(
            f"Gas price {gas_price_wei} wei exceeds ceiling {ceiling_wei} wei",
            chain_id=chain_id,
            details={"gas_price_wei": gas_price_wei, "ceiling_wei": ceiling_wei},
        )
        self.gas_price_wei = gas_price_wei
        self.ceiling_wei = ceiling_wei


class InsufficientGasError(SkippableError):
    """Native balance too low to operate on a chain."""


# Upstream data
class UpstreamDataError(BridgerError):
    category = ErrorCategory.UPSTREAM_DATA


class MalformedQuoteError(UpstreamDataError):
    """A quote response is missing fields needed for execution."""


class ProviderError(UpstreamDataError):
    """HTTP failure from the swap or bridge API."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message, details={"provider": provider, "status_code": status_code, "body": body})
        self.provider = provider
        self.status_code = status_code
        self.body = body


# On-chain
class OnChainError(BridgerError):
    category = ErrorCategory.ON_CHAIN


class RpcError(OnChainError):
    """JSON-RPC transport or error response."""


class GasEstimationError(OnChainError):
    """eth_estimateGas failed."""


class InsufficientFundsError(OnChainError):
    """Node rejected a transaction because the sender cannot pay for it."""


class TransactionRevertedError(OnChainError):
    """Transaction was mined with status 0."""

    def __init__(self, tx_hash: str, *, chain_id: Optional[int] = None) -> None:
        super().__init__(f"Transaction {tx_hash} reverted", chain_id=chain_id, details={"tx_hash": tx_hash})
        self.tx_hash = tx_hash


class ConfirmationTimeoutError(OnChainError):
    """No receipt within the configured confirmation timeout."""

    def __init__(self, tx_hash: str, timeout: float, *, chain_id: Optional[int] = None) -> None:
        super().__init__(
            f"No receipt for {tx_hash} after {timeout}s",
            chain_id=chain_id,
            details={"tx_hash": tx_hash, "timeout": timeout},
        )
        self.tx_hash = tx_hash


# Fatal
class FatalError(BridgerError):
    category = ErrorCategory.FATAL


class ConfigurationError(FatalError):
    pass


class WalletStoreError(FatalError):
    pass


class NoActiveWalletsError(FatalError):
    def __init__(self, message: str = "No active wallets available") -> None:
        super().__init__(message)


# Validation
class ValidationError(BridgerError):
    category = ErrorCategory.VALIDATION


class UnknownChainError(ValidationError):
    def __init__(self, chain_id: Any) -> None:
        super().__init__(f"Unsupported chain: {chain_id}", details={"chain_id": chain_id})


class UnknownTokenError(ValidationError):
    def __init__(self, symbol: str, chain_id: int) -> None:
        super().__init__(f"Token {symbol} is not tracked on chain {chain_id}", chain_id=chain_id)
        self.symbol = symbol


_FUNDS_PATTERNS = ("insufficient funds", "insufficient balance", "exceeds balance")
_REVERT_PATTERNS = ("execution reverted", "revert", "out of gas")


def classify_error(error: BaseException) -> ErrorCategory:
    """
    Classify an exception into an ErrorCategory.

    Bridger errors carry their own category; httpx failures count as upstream
    data problems and node messages are matched by pattern.
    """
    if isinstance(error, BridgerError):
        return error.category

    if isinstance(error, (httpx.HTTPStatusError, httpx.RequestError)):
        return ErrorCategory.UPSTREAM_DATA

    message = str(error).lower()
    if any(p in message for p in _FUNDS_PATTERNS):
        return ErrorCategory.ON_CHAIN
    if any(p in message for p in _REVERT_PATTERNS):
        return ErrorCategory.ON_CHAIN

    return ErrorCategory.UNKNOWN


def is_insufficient_funds_message(message: str) -> bool:
    lowered = message.lower()
    return any(p in lowered for p in _FUNDS_PATTERNS)
