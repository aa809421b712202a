import json

import httpx
import pytest

from bridger.core.bridge.constants import CHAIN_METADATA
from bridger.providers.rpc import EvmRpcProvider
from bridger.services.balances import BalanceReader
from helpers import ETH


@pytest.fixture
def reader(rpc, registry):
    return BalanceReader(rpc, registry)


@pytest.mark.asyncio
async def test_snapshot_reads_every_chain(rpc, reader, account):
    rpc.set_native(8453, account.address, ETH // 100)
    rpc.set_token(8453, "WETH", account.address, 2 * 10**15)
    rpc.set_token(42161, "USDC", account.address, 5 * 10**6)

    snapshot = await reader.snapshot(account.address)

    assert set(snapshot.chains) == {8453, 42161, 10, 59144}
    assert snapshot.native(8453).raw == ETH // 100
    assert snapshot.native(8453).formatted == "0.01"
    assert snapshot.token(8453, "WETH").formatted == "0.002"
    usdc = snapshot.token(42161, "USDC")
    assert usdc.raw == 5 * 10**6
    assert usdc.decimals == 6
    assert usdc.formatted == "5"
    assert snapshot.token(10, "USDC").raw == 0


@pytest.mark.asyncio
async def test_failed_read_is_isolated(rpc, reader, account):
    rpc.set_token(8453, "USDC", account.address, 3 * 10**6)
    rpc.set_token(42161, "WETH", account.address, 10**16)
    rpc.failing_tokens.add((8453, CHAIN_METADATA[8453]["tokens"]["WETH"].lower()))
    rpc.failing_native.add(10)

    snapshot = await reader.snapshot(account.address)

    weth_base = snapshot.token(8453, "WETH")
    assert weth_base.error is not None
    assert weth_base.raw is None
    assert not weth_base.is_available
    assert snapshot.token(8453, "USDC").raw == 3 * 10**6
    assert snapshot.token(42161, "WETH").raw == 10**16
    assert snapshot.native(10).error is not None
    assert snapshot.token(10, "USDC").error is None
    assert set(snapshot.chains) == {8453, 42161, 10, 59144}


@pytest.mark.asyncio
async def test_snapshot_is_repeatable(rpc, reader, account):
    rpc.set_native(42161, account.address, 7 * 10**14)
    rpc.set_token(59144, "USDC", account.address, 12 * 10**6)

    first = await reader.snapshot(account.address)
    second = await reader.snapshot(account.address)

    assert first == second


@pytest.mark.asyncio
async def test_null_rpc_result_is_recorded_as_error(registry, account):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": None})

    rpc = EvmRpcProvider(registry.rpc_urls(), transport=httpx.MockTransport(handler))
    reader = BalanceReader(rpc, registry)

    native = await reader.native_balance(8453, account.address)
    usdc = await reader.token_balance(8453, "USDC", account.address)
    await rpc.close()

    assert native.error is not None
    assert native.raw is None
    assert usdc.error is not None
    assert not usdc.is_available
