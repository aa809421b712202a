"""Shared fixtures: an in-memory JSON-RPC stand-in and a funded test account."""

import pytest
from eth_account import Account

from bridger.core.bridge.chain_registry import ChainRegistry
from bridger.core.execution.executor import TransactionExecutor
from bridger.services.wallets import WalletRecord
from helpers import TEST_PRIVATE_KEY, FakeRpc


@pytest.fixture
def registry() -> ChainRegistry:
    return ChainRegistry()


@pytest.fixture
def rpc() -> FakeRpc:
    return FakeRpc()


@pytest.fixture
def executor(rpc) -> TransactionExecutor:
    return TransactionExecutor(rpc, max_gas_price_gwei=0.1)


@pytest.fixture
def account():
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def wallet(account) -> WalletRecord:
    return WalletRecord(address=account.address, private_key=TEST_PRIVATE_KEY, active=True)
