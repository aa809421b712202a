"""
Calldata encoding and transaction construction for the ERC-20 and WETH calls bridger makes.
"""

from __future__ import annotations

from typing import Any, Optional

from .models import PreparedTransaction, TransactionType


# Minimal selectors for encoding
ERC20_APPROVE_SELECTOR = "0x095ea7b3"    # approve(address,uint256)
ERC20_TRANSFER_SELECTOR = "0xa9059cbb"   # transfer(address,uint256)
ERC20_BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)
ERC20_DECIMALS_SELECTOR = "0x313ce567"   # decimals()
ERC20_ALLOWANCE_SELECTOR = "0xdd62ed3e"  # allowance(address,address)
WETH_DEPOSIT_SELECTOR = "0xd0e30db0"     # deposit()

# Maximum uint256 for unlimited approval
MAX_UINT256 = 2**256 - 1

APPROVE_GAS_LIMIT = 100_000
WRAP_GAS_LIMIT = 100_000
NATIVE_TRANSFER_GAS = 21_000


def _encode_uint256(value: int) -> str:
    """Encode a uint256 as a 32-byte hex string (without 0x prefix)."""
    return format(value, "064x")


def _encode_address(address: str) -> str:
    """Encode an address as a 32-byte hex string (without 0x prefix)."""
    addr = address.lower().replace("0x", "")
    return addr.zfill(64)


def decode_uint256(data: Optional[str]) -> int:
    """Decode the first 32-byte word of an ``eth_call`` result."""
    if not data or data == "0x":
        raise ValueError("empty call result")
    body = data[2:] if data.startswith("0x") else data
    return int(body[:64], 16)


def parse_quantity(value: Any) -> int:
    """Parse a wei quantity given as int, decimal string or hex string."""
    if value is None or value == "":
        return 0
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.lower().startswith("0x") else int(text)


def encode_balance_of(owner: str) -> str:
    return ERC20_BALANCE_OF_SELECTOR + _encode_address(owner)


def encode_decimals() -> str:
    return ERC20_DECIMALS_SELECTOR


def encode_allowance(owner: str, spender: str) -> str:
    return ERC20_ALLOWANCE_SELECTOR + _encode_address(owner) + _encode_address(spender)


class TransactionBuilder:
    """
    Builds transactions for the calls bridger submits.

    Handles:
    - ERC20 approvals and transfers
    - WETH deposits (wrapping)
    - Native token transfers
    - Raw payloads returned by the swap and bridge APIs
    """

    @staticmethod
    def build_erc20_approve(
        chain_id: int,
        owner_address: str,
        token_address: str,
        spender_address: str,
        amount: int = MAX_UINT256,
    ) -> PreparedTransaction:
        # Encode: approve(address spender, uint256 amount)
        calldata = (
            ERC20_APPROVE_SELECTOR +
            _encode_address(spender_address) +
            _encode_uint256(amount)
        )

        return PreparedTransaction(
            tx_type=TransactionType.APPROVE,
            chain_id=chain_id,
            from_address=owner_address,
            to_address=token_address,
            data=calldata,
            gas_limit=APPROVE_GAS_LIMIT,
            description=f"Approve {spender_address[:10]}... to spend tokens",
        )

    @staticmethod
    def build_erc20_transfer(
        chain_id: int,
        from_address: str,
        token_address: str,
        to_address: str,
        amount: int,
    ) -> PreparedTransaction:
        """
        Build an ERC20 transfer transaction.

        Args:
            chain_id: The chain ID
            from_address: The sender address
            token_address: The ERC20 token contract
            to_address: The recipient address
            amount: The amount to transfer (in smallest units)
        """
        calldata = (
            ERC20_TRANSFER_SELECTOR +
            _encode_address(to_address) +
            _encode_uint256(amount)
        )

        return PreparedTransaction(
            tx_type=TransactionType.TRANSFER,
            chain_id=chain_id,
            from_address=from_address,
            to_address=token_address,
            data=calldata,
            description=f"Transfer tokens to {to_address[:10]}...",
        )

    @staticmethod
    def build_native_transfer(
        chain_id: int,
        from_address: str,
        to_address: str,
        amount_wei: int,
    ) -> PreparedTransaction:
        return PreparedTransaction(
            tx_type=TransactionType.TRANSFER,
            chain_id=chain_id,
            from_address=from_address,
            to_address=to_address,
            data="0x",
            value=amount_wei,
            gas_limit=NATIVE_TRANSFER_GAS,
            description=f"Transfer native token to {to_address[:10]}...",
        )

    @staticmethod
    def build_wrap(
        chain_id: int,
        from_address: str,
        weth_address: str,
        amount_wei: int,
    ) -> PreparedTransaction:
        """WETH ``deposit()`` carrying ``amount_wei`` of native value."""
        return PreparedTransaction(
            tx_type=TransactionType.WRAP,
            chain_id=chain_id,
            from_address=from_address,
            to_address=weth_address,
            data=WETH_DEPOSIT_SELECTOR,
            value=amount_wei,
            gas_limit=WRAP_GAS_LIMIT,
            description="Wrap native token",
        )

    @staticmethod
    def build_from_payload(
        tx_type: TransactionType,
        chain_id: int,
        from_address: str,
        to_address: str,
        data: str,
        value: Any = 0,
        gas_limit: Optional[int] = None,
        description: str = "",
    ) -> PreparedTransaction:
        """Build a transaction from an API-provided ``{to, data, value}`` payload."""
        return PreparedTransaction(
            tx_type=tx_type,
            chain_id=chain_id,
            from_address=from_address,
            to_address=to_address,
            data=data or "0x",
            value=parse_quantity(value),
            gas_limit=gas_limit,
            description=description,
        )
