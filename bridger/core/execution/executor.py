"""
Transaction executor for on-chain execution.

Handles the full lifecycle of a bridger transaction:
- Gas price ceiling check (fresh price before every write)
- Gas estimation
- Nonce lookup
- Local signing
- Submission and receipt wait
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address, to_hex

from ...providers.rpc import EvmRpcProvider, receipt_succeeded
from ..errors import (
    GasEstimationError,
    GasPriceTooHighError,
    InsufficientFundsError,
    RpcError,
    TransactionRevertedError,
    is_insufficient_funds_message,
)
from .models import GasEstimate, PreparedTransaction, TransactionResult
from .tx_builder import TransactionBuilder, decode_uint256, encode_allowance


logger = logging.getLogger(__name__)

GAS_BUFFER_PERCENT = 120


def gwei_to_wei(gwei: float) -> int:
    return int(Decimal(str(gwei)) * Decimal(10**9))


class TransactionExecutor:
    """
    Signs and submits transactions on the supported EVM chains.

    Every write goes through ``send`` so that the gas price ceiling is
    checked against a freshly fetched price immediately before submission.
    """

    def __init__(
        self,
        rpc: EvmRpcProvider,
        *,
        max_gas_price_gwei: float = 0.1,
        confirmation_timeout: Optional[float] = None,
        poll_interval: float = 2.0,
        gas_buffer_percent: int = GAS_BUFFER_PERCENT,
    ) -> None:
        self.rpc = rpc
        self.max_gas_price_wei = gwei_to_wei(max_gas_price_gwei)
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval
        self.gas_buffer_percent = gas_buffer_percent

    async def check_gas_price(self, chain_id: int) -> int:
        """Return the current gas price, raising if it exceeds the ceiling."""
        gas_price = await self.rpc.get_gas_price(chain_id)
        if gas_price > self.max_gas_price_wei:
            logger.warning(
                "Gas price too high on chain %s: %s wei > %s wei",
                chain_id,
                gas_price,
                self.max_gas_price_wei,
            )
            raise GasPriceTooHighError(gas_price, self.max_gas_price_wei, chain_id=chain_id)
        return gas_price

    async def estimate_gas(self, tx: PreparedTransaction) -> int:
        """Estimate gas and apply the safety buffer."""
        try:
            estimated = await self.rpc.estimate_gas(tx.chain_id, tx.call_object())
        except RpcError as exc:
            if is_insufficient_funds_message(str(exc)):
                raise InsufficientFundsError(str(exc), chain_id=tx.chain_id) from exc
            logger.error("Gas estimation failed on chain %s: %s", tx.chain_id, exc)
            raise GasEstimationError(f"Failed to estimate gas: {exc}", chain_id=tx.chain_id) from exc
        return estimated * self.gas_buffer_percent // 100

    async def send(self, account: LocalAccount, tx: PreparedTransaction) -> TransactionResult:
        """Check gas price, sign, submit and wait for the receipt of ``tx``."""
        gas_price = await self.check_gas_price(tx.chain_id)
        gas_limit = tx.gas_limit or await self.estimate_gas(tx)
        nonce = await self.rpc.get_transaction_count(tx.chain_id, account.address)

        tx_dict: Dict[str, Any] = {
            "to": to_checksum_address(tx.to_address),
            "value": tx.value,
            "gas": gas_limit,
            "gasPrice": gas_price,
            "nonce": nonce,
            "chainId": tx.chain_id,
            "data": tx.data or "0x",
        }
        signed = account.sign_transaction(tx_dict)

        try:
            tx_hash = await self.rpc.send_raw_transaction(tx.chain_id, to_hex(signed.raw_transaction))
        except RpcError as exc:
            if is_insufficient_funds_message(str(exc)):
                raise InsufficientFundsError(str(exc), chain_id=tx.chain_id) from exc
            raise

        logger.info(
            "%s sent on chain %s: %s (nonce=%s, gas=%s)",
            tx.tx_type.value,
            tx.chain_id,
            tx_hash,
            nonce,
            gas_limit,
        )

        receipt = await self.rpc.wait_for_receipt(
            tx.chain_id,
            tx_hash,
            timeout=self.confirmation_timeout,
            poll_interval=self.poll_interval,
        )
        if not receipt_succeeded(receipt):
            logger.error("Transaction reverted on chain %s: %s", tx.chain_id, tx_hash)
            raise TransactionRevertedError(tx_hash, chain_id=tx.chain_id)

        block_number = receipt.get("blockNumber")
        gas_used = receipt.get("gasUsed")
        logger.info("Transaction confirmed on chain %s: %s", tx.chain_id, tx_hash)
        return TransactionResult(
            tx_hash=tx_hash,
            chain_id=tx.chain_id,
            gas=GasEstimate(gas_limit=gas_limit, gas_price_wei=gas_price),
            block_number=int(block_number, 16) if isinstance(block_number, str) else block_number,
            gas_used=int(gas_used, 16) if isinstance(gas_used, str) else gas_used,
            receipt=receipt,
        )

    async def allowance(self, chain_id: int, token: str, owner: str, spender: str) -> int:
        result = await self.rpc.eth_call(chain_id, token, encode_allowance(owner, spender))
        return decode_uint256(result)

    async def approve_if_needed(
        self,
        account: LocalAccount,
        chain_id: int,
        token: str,
        spender: str,
    ) -> Optional[TransactionResult]:
        """Grant an unlimited allowance unless one is already in place.

        Any non-zero allowance counts as sufficient. Returns ``None`` when no
        approval was sent.
        """
        current = await self.allowance(chain_id, token, account.address, spender)
        if current > 0:
            logger.info("Allowance for %s already set on chain %s", spender, chain_id)
            return None

        tx = TransactionBuilder.build_erc20_approve(
            chain_id=chain_id,
            owner_address=account.address,
            token_address=token,
            spender_address=spender,
        )
        return await self.send(account, tx)

    async def wrap_native(
        self,
        account: LocalAccount,
        chain_id: int,
        weth_address: str,
        amount_wei: int,
    ) -> TransactionResult:
        tx = TransactionBuilder.build_wrap(chain_id, account.address, weth_address, amount_wei)
        return await self.send(account, tx)

    async def transfer_erc20(
        self,
        account: LocalAccount,
        chain_id: int,
        token: str,
        to_address: str,
        amount: int,
    ) -> TransactionResult:
        tx = TransactionBuilder.build_erc20_transfer(chain_id, account.address, token, to_address, amount)
        return await self.send(account, tx)

    async def transfer_native(
        self,
        account: LocalAccount,
        chain_id: int,
        to_address: str,
        amount_wei: int,
    ) -> TransactionResult:
        tx = TransactionBuilder.build_native_transfer(chain_id, account.address, to_address, amount_wei)
        return await self.send(account, tx)
