"""Test doubles and canned API responses shared across the suite."""

from typing import Any, Dict, List, Optional, Set, Tuple
from unittest.mock import AsyncMock

from bridger.core.bridge.constants import CHAIN_METADATA, TOKEN_DECIMALS
from bridger.core.errors import RpcError
from bridger.core.execution.tx_builder import (
    ERC20_ALLOWANCE_SELECTOR,
    ERC20_BALANCE_OF_SELECTOR,
    ERC20_DECIMALS_SELECTOR,
)


TEST_PRIVATE_KEY = "0x" + "11" * 32
ROUTER = "0x1111111254EEB25477B68fb85Ed929f73A960582"
RELAY_DEPOSITOR = "0xa5F565650890fBA1824Ee0F21EbBbF660a179934"

ETH = 10**18


def _word(value: int) -> str:
    return "0x" + format(value, "064x")


def _addr(word: str) -> str:
    return "0x" + word[-40:].lower()


def _token_decimals(chain_id: int, token: str) -> int:
    for symbol, address in CHAIN_METADATA[chain_id]["tokens"].items():
        if address.lower() == token.lower():
            return TOKEN_DECIMALS[symbol]
    return 18


class FakeRpc:
    """Duck-typed EvmRpcProvider backed by dictionaries."""

    def __init__(self, gas_price: int = 10**7) -> None:
        self.gas_price = gas_price
        self.native: Dict[Tuple[int, str], int] = {}
        self.tokens: Dict[Tuple[int, str, str], int] = {}
        self.allowances: Dict[Tuple[int, str, str, str], int] = {}
        self.failing_tokens: Set[Tuple[int, str]] = set()
        self.failing_native: Set[int] = set()
        self.sent: List[Tuple[int, str]] = []
        self.receipt_status = "0x1"
        self.estimate = 60_000
        self.estimate_error: Optional[str] = None

    # helpers used by tests
    def set_native(self, chain_id: int, owner: str, raw: int) -> None:
        self.native[(chain_id, owner.lower())] = raw

    def set_token(self, chain_id: int, symbol: str, owner: str, raw: int) -> None:
        token = CHAIN_METADATA[chain_id]["tokens"][symbol]
        self.tokens[(chain_id, token.lower(), owner.lower())] = raw

    def set_allowance(self, chain_id: int, token: str, owner: str, spender: str, raw: int) -> None:
        self.allowances[(chain_id, token.lower(), owner.lower(), spender.lower())] = raw

    # EvmRpcProvider surface
    async def get_balance(self, chain_id: int, address: str) -> int:
        if chain_id in self.failing_native:
            raise RpcError("native read failed", chain_id=chain_id)
        return self.native.get((chain_id, address.lower()), 0)

    async def get_gas_price(self, chain_id: int) -> int:
        return self.gas_price

    async def eth_call(self, chain_id: int, to: str, data: str) -> str:
        token = to.lower()
        if (chain_id, token) in self.failing_tokens:
            raise RpcError("eth_call failed", chain_id=chain_id)
        selector = data[:10]
        body = data[10:]
        if selector == ERC20_DECIMALS_SELECTOR:
            return _word(_token_decimals(chain_id, token))
        if selector == ERC20_BALANCE_OF_SELECTOR:
            owner = _addr(body[:64])
            return _word(self.tokens.get((chain_id, token, owner), 0))
        if selector == ERC20_ALLOWANCE_SELECTOR:
            owner = _addr(body[:64])
            spender = _addr(body[64:128])
            return _word(self.allowances.get((chain_id, token, owner, spender), 0))
        raise RpcError(f"unexpected call {selector}", chain_id=chain_id)

    async def estimate_gas(self, chain_id: int, tx: Dict[str, Any]) -> int:
        if self.estimate_error:
            raise RpcError(self.estimate_error, chain_id=chain_id)
        return self.estimate

    async def get_transaction_count(self, chain_id: int, address: str) -> int:
        return len([sent for sent in self.sent if sent[0] == chain_id])

    async def send_raw_transaction(self, chain_id: int, raw_tx: str) -> str:
        self.sent.append((chain_id, raw_tx))
        return _word(len(self.sent))

    async def wait_for_receipt(self, chain_id: int, tx_hash: str, *, timeout=None, poll_interval=2.0):
        return {"status": self.receipt_status, "blockNumber": "0x10", "gasUsed": "0x5208"}

    async def close(self) -> None:
        return None


def relay_quote_response(
    chain_id: int,
    *,
    request_id: str = "0xrequest",
    to: str = RELAY_DEPOSITOR,
    amount_out: str = "990000",
) -> Dict[str, Any]:
    return {
        "steps": [
            {
                "id": "deposit",
                "action": "Confirm transaction in your wallet",
                "description": "Depositing funds to the relayer",
                "kind": "transaction",
                "requestId": request_id,
                "items": [
                    {
                        "status": "incomplete",
                        "data": {
                            "to": to,
                            "data": "0x58109c",
                            "value": "0",
                            "chainId": chain_id,
                        },
                    }
                ],
            }
        ],
        "details": {
            "currencyOut": {"amount": amount_out},
            "timeEstimate": 12,
        },
    }


def oneinch_swap_response(dst_address: str, dst_symbol: str, dst_decimals: int, amount: str) -> Dict[str, Any]:
    return {
        "dstAmount": amount,
        "dstToken": {"address": dst_address, "symbol": dst_symbol, "decimals": dst_decimals},
        "tx": {
            "from": "0x0000000000000000000000000000000000000001",
            "to": ROUTER,
            "data": "0x07ed2379",
            "value": "0",
        },
    }


class FakeRelay:
    def __init__(self) -> None:
        self.quote = AsyncMock()
        self.get_status = AsyncMock(return_value={"status": "pending"})


class FakeOneInch:
    def __init__(self) -> None:
        self.swap = AsyncMock()
