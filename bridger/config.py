from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.errors import ConfigurationError


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log renderer: console or json")

    # Wallets
    wallet_file: str = Field(default="wallets.json", description="Path to the wallet store JSON file")
    funding_private_key: str = Field(
        default="",
        description="Private key of the wallet used by the topup command",
        repr=False,
    )

    # RPC endpoints
    base_rpc_url: str = Field(default="https://base.llamarpc.com", description="Base RPC endpoint")
    arbitrum_rpc_url: str = Field(default="https://arb1.arbitrum.io/rpc", description="Arbitrum RPC endpoint")
    optimism_rpc_url: str = Field(default="https://mainnet.optimism.io", description="Optimism RPC endpoint")
    linea_rpc_url: str = Field(default="https://rpc.linea.build", description="Linea RPC endpoint")

    # Relay bridge aggregator
    relay_base_url: str = Field(
        default="https://api.relay.link",
        description="Relay API base URL",
        validation_alias=AliasChoices("relay_base_url", "relay_api_url", "RELAY_BASE_URL", "RELAY_API_URL"),
    )
    relay_referrer: str = Field(default="relay.link", description="Referrer tag sent with Relay quotes")

    # 1inch swap aggregator
    oneinch_base_url: str = Field(default="https://api.1inch.dev", description="1inch API base URL")
    oneinch_api_key: str = Field(
        default="",
        description="1inch developer portal API key",
        validation_alias=AliasChoices("oneinch_api_key", "ONEINCH_API_KEY", "INCH_API_KEY"),
        repr=False,
    )
    oneinch_fee_percent: float = Field(default=0.0, ge=0, le=3, description="Integrator fee percent for 1inch swaps")
    oneinch_referrer: str = Field(default="", description="Referrer address receiving the integrator fee")

    # Trading
    slippage_tolerance: float = Field(
        default=0.5,
        gt=0,
        le=50,
        description="Slippage tolerance in percent",
        validation_alias=AliasChoices("slippage_tolerance", "SLIPPAGE_TOLERANCE", "slippage"),
    )
    swap_amount_percent: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Share of the selected balance swapped and bridged each cycle",
    )

    # Scheduling (minutes)
    interval_min: float = Field(
        default=1.0,
        ge=0,
        description="Minimum minutes between cycles",
        validation_alias=AliasChoices("interval_min", "INTERVAL_MIN", "repeat_interval_min", "REPEAT_INTERVAL_MIN"),
    )
    interval_max: float = Field(
        default=2.0,
        ge=0,
        description="Maximum minutes between cycles",
        validation_alias=AliasChoices("interval_max", "INTERVAL_MAX", "repeat_interval_max", "REPEAT_INTERVAL_MAX"),
    )

    # Gas
    max_gas_price_gwei: float = Field(default=0.1, gt=0, description="Refuse to send transactions above this gas price")
    reserve_chain_id: int = Field(default=8453, description="Chain holding the gas reserve used for rescues")
    min_gas_balance_eth: float = Field(default=0.0005, description="Native balance required before operating on a chain")
    gas_rescue_amount_eth: float = Field(default=0.001, description="Amount wrapped and bridged by a gas rescue")
    gas_rescue_fee_buffer_eth: float = Field(
        default=0.0005,
        description="Extra native balance the reserve chain must hold on top of the rescue amount",
    )
    gas_rescue_wait_seconds: float = Field(default=60.0, ge=0, description="Wait before re-checking a rescue bridge")

    # Transport
    request_timeout_seconds: int = Field(default=30, description="HTTP request timeout")
    confirmation_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Maximum seconds to wait for a receipt (unset waits indefinitely)",
    )
    receipt_poll_interval_seconds: float = Field(default=2.0, gt=0, description="Receipt polling interval")

    # Topup
    topup_usdc_per_wallet: float = Field(default=2.0, gt=0, description="USDC spent funding each wallet")

    @model_validator(mode="after")
    def _check_interval(self) -> "Settings":
        if self.interval_max < self.interval_min:
            raise ValueError("interval_max must be greater than or equal to interval_min")
        return self

    @property
    def has_oneinch_key(self) -> bool:
        return bool(self.oneinch_api_key)

    @property
    def rpc_urls(self) -> Dict[int, str]:
        return {
            8453: self.base_rpc_url,
            42161: self.arbitrum_rpc_url,
            10: self.optimism_rpc_url,
            59144: self.linea_rpc_url,
        }

    def require_swap_credentials(self) -> None:
        """Raise when the swap aggregator cannot be used."""
        if not self.has_oneinch_key:
            raise ConfigurationError("ONEINCH_API_KEY is required for swaps")


def load_settings(**overrides: Any) -> Settings:
    return Settings(**overrides)
