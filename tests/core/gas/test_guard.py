import pytest
from unittest.mock import AsyncMock

from bridger.core.bridge.client import BridgeClient
from bridger.core.bridge.constants import NATIVE_PLACEHOLDER
from bridger.core.execution.executor import gwei_to_wei
from bridger.core.gas.guard import GasCheckStatus, GasGuard, eth_to_wei
from helpers import FakeRelay, relay_quote_response


@pytest.fixture
def relay():
    provider = FakeRelay()
    provider.quote.return_value = relay_quote_response(8453, request_id="0xrescue")
    return provider


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def guard(rpc, executor, registry, relay, sleep):
    bridge = BridgeClient(relay, executor, registry)
    return GasGuard(rpc, executor, bridge, registry, sleep=sleep)


def test_eth_to_wei():
    assert eth_to_wei(0.0005) == 5 * 10**14
    assert eth_to_wei(0.001) == 10**15


@pytest.mark.asyncio
async def test_sufficient_balance_is_ok(guard, rpc, relay, account):
    rpc.set_native(42161, account.address, eth_to_wei(0.0005))

    check = await guard.ensure_gas(account, 42161)

    assert check.status == GasCheckStatus.OK
    assert not check.rescued
    relay.quote.assert_not_awaited()
    assert rpc.sent == []


@pytest.mark.asyncio
async def test_low_reserve_is_insufficient_without_transactions(guard, rpc, relay, account):
    rpc.set_native(42161, account.address, eth_to_wei(0.0002))
    rpc.set_native(8453, account.address, eth_to_wei(0.0008))

    check = await guard.ensure_gas(account, 42161)

    assert check.status == GasCheckStatus.INSUFFICIENT
    assert rpc.sent == []
    relay.quote.assert_not_awaited()


@pytest.mark.asyncio
async def test_reserve_chain_fails_closed(guard, rpc, relay, account):
    rpc.set_native(8453, account.address, eth_to_wei(0.0001))

    check = await guard.ensure_gas(account, 8453)

    assert check.status == GasCheckStatus.INSUFFICIENT
    assert rpc.sent == []
    relay.quote.assert_not_awaited()


@pytest.mark.asyncio
async def test_rescue_tops_up_deficient_chain(guard, rpc, relay, sleep, account):
    rpc.set_native(10, account.address, eth_to_wei(0.0001))
    rpc.set_native(8453, account.address, eth_to_wei(0.01))

    def landed(request_id):
        rpc.set_native(10, account.address, eth_to_wei(0.0009))
        return {"status": "completed"}

    relay.get_status.side_effect = landed

    check = await guard.ensure_gas(account, 10)

    assert check.status == GasCheckStatus.OK
    assert check.rescued
    assert check.rescue_request_id == "0xrescue"
    payload = relay.quote.await_args.args[0]
    assert payload["originChainId"] == 8453
    assert payload["destinationChainId"] == 10
    assert payload["originCurrency"] == "0x4200000000000000000000000000000000000006"
    assert payload["destinationCurrency"] == NATIVE_PLACEHOLDER
    assert payload["amount"] == str(eth_to_wei(0.001))
    sleep.assert_awaited_once_with(60.0)
    assert relay.get_status.await_count == 2
    # wrap, approve, deposit
    assert len(rpc.sent) == 3


@pytest.mark.asyncio
async def test_pending_rescue_not_landed_is_insufficient(guard, rpc, relay, account):
    rpc.set_native(59144, account.address, 0)
    rpc.set_native(8453, account.address, eth_to_wei(0.01))
    relay.get_status.return_value = {"status": "pending"}

    check = await guard.ensure_gas(account, 59144)

    assert check.status == GasCheckStatus.INSUFFICIENT
    assert check.rescue_request_id == "0xrescue"


@pytest.mark.asyncio
async def test_failed_rescue_status_is_insufficient(guard, rpc, relay, account):
    rpc.set_native(59144, account.address, 0)
    rpc.set_native(8453, account.address, eth_to_wei(0.01))
    relay.get_status.return_value = {"status": "refund"}

    check = await guard.ensure_gas(account, 59144)

    assert check.status == GasCheckStatus.INSUFFICIENT
    assert "refund" in check.reason


@pytest.mark.asyncio
async def test_rescue_blocked_by_gas_ceiling(guard, rpc, relay, account):
    rpc.set_native(42161, account.address, 0)
    rpc.set_native(8453, account.address, eth_to_wei(0.01))
    rpc.gas_price = gwei_to_wei(0.5)

    check = await guard.ensure_gas(account, 42161)

    assert check.status == GasCheckStatus.INSUFFICIENT
    assert rpc.sent == []
    relay.quote.assert_not_awaited()


@pytest.mark.asyncio
async def test_unreadable_balance_fails_closed(guard, rpc, account):
    rpc.failing_native.add(10)

    check = await guard.ensure_gas(account, 10)

    assert check.status == GasCheckStatus.INSUFFICIENT
    assert rpc.sent == []
