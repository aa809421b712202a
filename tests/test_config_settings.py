import pytest
from pydantic import ValidationError

from bridger.config import Settings
from bridger.core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "SLIPPAGE_TOLERANCE",
        "INTERVAL_MIN",
        "INTERVAL_MAX",
        "REPEAT_INTERVAL_MIN",
        "REPEAT_INTERVAL_MAX",
        "RELAY_API_URL",
        "RELAY_BASE_URL",
        "ONEINCH_API_KEY",
        "BASE_RPC_URL",
        "MAX_GAS_PRICE_GWEI",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.slippage_tolerance == 0.5
    assert settings.interval_min == 1.0
    assert settings.interval_max == 2.0
    assert settings.max_gas_price_gwei == 0.1
    assert settings.reserve_chain_id == 8453
    assert settings.confirmation_timeout_seconds is None
    assert settings.relay_base_url == "https://api.relay.link"
    assert settings.rpc_urls[59144] == "https://rpc.linea.build"


def test_legacy_interval_aliases(monkeypatch):
    """REPEAT_INTERVAL_* names from older deployments still load."""

    monkeypatch.setenv("REPEAT_INTERVAL_MIN", "3")
    monkeypatch.setenv("REPEAT_INTERVAL_MAX", "7")

    settings = Settings(_env_file=None)

    assert settings.interval_min == 3
    assert settings.interval_max == 7


def test_relay_api_url_alias(monkeypatch):
    monkeypatch.setenv("RELAY_API_URL", "https://relay.example")

    settings = Settings(_env_file=None)

    assert settings.relay_base_url == "https://relay.example"


def test_rpc_override(monkeypatch):
    monkeypatch.setenv("BASE_RPC_URL", "https://base.example")

    settings = Settings(_env_file=None)

    assert settings.rpc_urls[8453] == "https://base.example"


def test_interval_max_below_min_rejected(monkeypatch):
    monkeypatch.setenv("INTERVAL_MIN", "5")
    monkeypatch.setenv("INTERVAL_MAX", "2")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_slippage_out_of_range_rejected(monkeypatch):
    monkeypatch.setenv("SLIPPAGE_TOLERANCE", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_swap_credentials_required():
    settings = Settings(_env_file=None)

    with pytest.raises(ConfigurationError):
        settings.require_swap_credentials()


def test_swap_credentials_present(monkeypatch):
    monkeypatch.setenv("ONEINCH_API_KEY", "secret")

    settings = Settings(_env_file=None)

    settings.require_swap_credentials()
    assert "secret" not in repr(settings)
