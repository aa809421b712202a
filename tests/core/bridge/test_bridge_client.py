import pytest
from unittest.mock import AsyncMock

from bridger.core.bridge.client import BridgeClient, slippage_to_bps
from bridger.core.bridge.constants import NATIVE_PLACEHOLDER
from bridger.core.bridge.models import BridgeQuoteRequest
from bridger.core.errors import GasPriceTooHighError, MalformedQuoteError, ProviderError
from bridger.core.execution.executor import gwei_to_wei
from bridger.core.execution.models import TransactionType
from helpers import FakeRelay, RELAY_DEPOSITOR, relay_quote_response

USDC_ARB = "0xaf88d065e77c8cC2239327C5EDb3A432268e5831"
WETH_OP = "0x4200000000000000000000000000000000000006"
USDC_OP = "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85"


@pytest.fixture
def relay():
    provider = FakeRelay()
    provider.quote.return_value = relay_quote_response(42161)
    return provider


@pytest.fixture
def bridge(relay, executor, registry):
    return BridgeClient(relay, executor, registry, slippage_percent=0.5, referrer="relay.link")


def _request(account, **overrides):
    params = dict(
        user=account.address,
        origin_chain_id=42161,
        destination_chain_id=10,
        origin_currency=USDC_ARB,
        amount=2_000_000,
        symbol="USDC",
    )
    params.update(overrides)
    return BridgeQuoteRequest(**params)


def test_slippage_to_bps():
    assert slippage_to_bps(0.5) == "50"
    assert slippage_to_bps(1) == "100"
    assert slippage_to_bps(0.05) == "5"


class TestDestinationCurrency:
    def test_explicit_currency_wins(self, bridge, account):
        request = _request(account, target_symbol="WETH", destination_currency=NATIVE_PLACEHOLDER)

        assert bridge.resolve_destination_currency(request) == NATIVE_PLACEHOLDER

    def test_target_symbol_resolved_on_destination(self, bridge, account):
        assert bridge.resolve_destination_currency(_request(account, target_symbol="WETH")) == WETH_OP

    def test_same_symbol_fallback(self, bridge, account):
        assert bridge.resolve_destination_currency(_request(account)) == USDC_OP


@pytest.mark.asyncio
async def test_quote_payload(bridge, relay, account):
    quote = await bridge.quote(_request(account, target_symbol="WETH"))

    payload = relay.quote.await_args.args[0]
    assert payload == {
        "user": account.address,
        "recipient": account.address,
        "originChainId": 42161,
        "destinationChainId": 10,
        "originCurrency": USDC_ARB,
        "destinationCurrency": WETH_OP,
        "amount": "2000000",
        "tradeType": "EXACT_INPUT",
        "referrer": "relay.link",
        "slippageTolerance": "50",
    }
    assert quote.request_id == "0xrequest"
    assert quote.expected_amount_out == 990000
    assert quote.time_estimate_seconds == 12
    assert quote.step("deposit").items[0].payload.to == RELAY_DEPOSITOR


@pytest.mark.asyncio
async def test_request_id_falls_back_to_top_level(bridge, relay, account):
    raw = relay_quote_response(42161)
    del raw["steps"][0]["requestId"]
    raw["requestId"] = "0xtop"
    relay.quote.return_value = raw

    quote = await bridge.quote(_request(account))

    assert quote.request_id == "0xtop"


@pytest.mark.asyncio
async def test_execute_submits_deposit_on_payload_chain(bridge, relay, rpc, executor, account):
    relay.quote.return_value = relay_quote_response(42161, request_id="0xabc")
    executor.send = AsyncMock(wraps=executor.send)
    quote = await bridge.quote(_request(account, origin_chain_id=8453))

    execution = await bridge.execute(account, quote)

    assert execution.chain_id == 42161
    assert execution.request_id == "0xabc"
    tx = executor.send.await_args.args[1]
    assert tx.tx_type == TransactionType.BRIDGE
    assert tx.to_address == RELAY_DEPOSITOR
    assert rpc.sent[0][0] == 42161


@pytest.mark.asyncio
async def test_missing_deposit_step(bridge, relay, rpc, account):
    raw = relay_quote_response(42161)
    raw["steps"][0]["id"] = "approve"
    relay.quote.return_value = raw
    quote = await bridge.quote(_request(account))

    with pytest.raises(MalformedQuoteError):
        await bridge.execute(account, quote)
    assert rpc.sent == []


@pytest.mark.asyncio
async def test_empty_deposit_items(bridge, relay, rpc, account):
    raw = relay_quote_response(42161)
    raw["steps"][0]["items"] = []
    relay.quote.return_value = raw
    quote = await bridge.quote(_request(account))

    with pytest.raises(MalformedQuoteError):
        await bridge.execute(account, quote)
    assert rpc.sent == []


@pytest.mark.asyncio
async def test_quote_without_steps_is_malformed(bridge, relay, account):
    relay.quote.return_value = {"details": {}}

    with pytest.raises(MalformedQuoteError):
        await bridge.quote(_request(account))


@pytest.mark.asyncio
async def test_execute_aborts_above_gas_ceiling(bridge, rpc, account):
    quote = await bridge.quote(_request(account))
    rpc.gas_price = gwei_to_wei(0.11)

    with pytest.raises(GasPriceTooHighError):
        await bridge.execute(account, quote)
    assert rpc.sent == []


@pytest.mark.asyncio
async def test_status_passthrough(bridge, relay):
    relay.get_status.return_value = {"status": "completed", "inTxHashes": ["0x1"]}

    status = await bridge.status("0xrequest")

    relay.get_status.assert_awaited_once_with("0xrequest")
    assert status.status == "completed"
    assert status.is_completed
    assert not status.is_pending


@pytest.mark.asyncio
async def test_status_error_propagates(bridge, relay):
    relay.get_status.side_effect = ProviderError("Relay GET /intents/status returned 500", provider="relay", status_code=500)

    with pytest.raises(ProviderError):
        await bridge.status("0xrequest")


@pytest.mark.asyncio
@pytest.mark.parametrize("details", ["oops", {"currencyOut": ["not", "a", "map"]}])
async def test_non_object_details_is_malformed(bridge, relay, account, details):
    raw = relay_quote_response(8453)
    raw["details"] = details
    relay.quote.return_value = raw

    with pytest.raises(MalformedQuoteError):
        await bridge.quote(_request(account))


@pytest.mark.asyncio
async def test_non_string_deposit_target_is_malformed(bridge, relay, account):
    raw = relay_quote_response(8453)
    raw["steps"][0]["items"][0]["data"]["to"] = 42
    relay.quote.return_value = raw

    with pytest.raises(MalformedQuoteError):
        await bridge.quote(_request(account))
