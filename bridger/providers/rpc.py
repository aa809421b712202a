"""Async JSON-RPC client for the EVM networks bridger talks to."""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

import httpx

from ..core.errors import ConfirmationTimeoutError, RpcError, UnknownChainError


logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


def _to_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.startswith("0x") else int(text)


class EvmRpcProvider:
    """Thin wrapper around the standard ``eth_*`` JSON-RPC methods, keyed by chain id."""

    def __init__(
        self,
        rpc_urls: Mapping[int, str],
        *,
        timeout_s: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._rpc_urls: Dict[int, str] = dict(rpc_urls)
        self._client = httpx.AsyncClient(timeout=timeout_s, transport=transport)
        self._ids = itertools.count(1)
        self._sleep = sleep

    async def call(self, chain_id: int, method: str, params: List[Any], *, allow_null: bool = False) -> Any:
        """Make an RPC call to the chain.

        A missing or null ``result`` raises ``RpcError`` unless ``allow_null`` is set.
        """
        rpc_url = self._rpc_urls.get(chain_id)
        if not rpc_url:
            raise UnknownChainError(chain_id)

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }

        try:
            response = await self._client.post(rpc_url, json=payload)
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPError as exc:
            raise RpcError(f"{method} failed on chain {chain_id}: {exc}", chain_id=chain_id) from exc
        except ValueError as exc:
            raise RpcError(f"{method} returned invalid JSON on chain {chain_id}", chain_id=chain_id) from exc

        if isinstance(result, dict) and result.get("error"):
            error = result["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise RpcError(f"RPC error: {message}", chain_id=chain_id, details={"error": error})

        if not isinstance(result, dict):
            raise RpcError(f"{method} returned a malformed response on chain {chain_id}", chain_id=chain_id)
        value = result.get("result")
        if value is None and not allow_null:
            raise RpcError(f"{method} returned no result on chain {chain_id}", chain_id=chain_id)
        return value

    async def get_balance(self, chain_id: int, address: str) -> int:
        return _to_int(await self.call(chain_id, "eth_getBalance", [address, "latest"]))

    async def get_gas_price(self, chain_id: int) -> int:
        return _to_int(await self.call(chain_id, "eth_gasPrice", []))

    async def eth_call(self, chain_id: int, to: str, data: str) -> str:
        return await self.call(chain_id, "eth_call", [{"to": to, "data": data}, "latest"])

    async def estimate_gas(self, chain_id: int, tx: Dict[str, Any]) -> int:
        return _to_int(await self.call(chain_id, "eth_estimateGas", [tx]))

    async def get_transaction_count(self, chain_id: int, address: str) -> int:
        return _to_int(await self.call(chain_id, "eth_getTransactionCount", [address, "pending"]))

    async def send_raw_transaction(self, chain_id: int, raw_tx: str) -> str:
        tx_hash = await self.call(chain_id, "eth_sendRawTransaction", [raw_tx])
        logger.info("Transaction submitted on chain %s: %s", chain_id, tx_hash)
        return tx_hash

    async def get_transaction_receipt(self, chain_id: int, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self.call(chain_id, "eth_getTransactionReceipt", [tx_hash], allow_null=True)

    async def wait_for_receipt(
        self,
        chain_id: int,
        tx_hash: str,
        *,
        timeout: Optional[float] = None,
        poll_interval: float = 2.0,
    ) -> Dict[str, Any]:
        """Poll for a receipt. ``timeout=None`` waits indefinitely."""
        started = time.monotonic()

        while True:
            try:
                receipt = await self.get_transaction_receipt(chain_id, tx_hash)
                if receipt:
                    return receipt
            except RpcError as exc:
                logger.warning("Error checking transaction %s: %s", tx_hash, exc)

            if timeout is not None and time.monotonic() - started >= timeout:
                raise ConfirmationTimeoutError(tx_hash, timeout, chain_id=chain_id)

            await self._sleep(poll_interval)

    async def close(self) -> None:
        await self._client.aclose()


def receipt_succeeded(receipt: Mapping[str, Any]) -> bool:
    """Receipt status 0x1 means success, 0x0 means the transaction reverted."""
    return _to_int(receipt.get("status", "0x1")) == 1
