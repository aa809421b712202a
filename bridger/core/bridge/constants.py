"""Constants and metadata for the supported networks."""

from __future__ import annotations

from typing import Any, Dict, Optional

# Native currency placeholder understood by Relay
NATIVE_PLACEHOLDER = "0x0000000000000000000000000000000000000000"
# Native currency placeholder understood by 1inch
ONEINCH_NATIVE_PLACEHOLDER = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"

NATIVE_ADDRESSES = frozenset({NATIVE_PLACEHOLDER.lower(), ONEINCH_NATIVE_PLACEHOLDER.lower()})

TRACKED_SYMBOLS = ("WETH", "USDC")

TOKEN_DECIMALS: Dict[str, int] = {
    "WETH": 18,
    "USDC": 6,
}

CHAIN_METADATA: Dict[int, Dict[str, Any]] = {
    8453: {
        "name": "Base",
        "rpc_url": "https://base.llamarpc.com",
        "native_symbol": "ETH",
        "native_decimals": 18,
        "tokens": {
            "WETH": "0x4200000000000000000000000000000000000006",
            "USDC": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        },
    },
    42161: {
        "name": "Arbitrum",
        "rpc_url": "https://arb1.arbitrum.io/rpc",
        "native_symbol": "ETH",
        "native_decimals": 18,
        "tokens": {
            "WETH": "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
            "USDC": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
        },
    },
    10: {
        "name": "Optimism",
        "rpc_url": "https://mainnet.optimism.io",
        "native_symbol": "ETH",
        "native_decimals": 18,
        "tokens": {
            "WETH": "0x4200000000000000000000000000000000000006",
            "USDC": "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85",
        },
    },
    59144: {
        "name": "Linea",
        "rpc_url": "https://rpc.linea.build",
        "native_symbol": "ETH",
        "native_decimals": 18,
        "tokens": {
            "WETH": "0xe5D7C2a44FfDDf6b295A15c148167daaAf5Cf34f",
            "USDC": "0x176211869cA2b568f2A7D4EE941E073a821EE1ff",
        },
    },
}

# Iteration order used for balance snapshots and tie-breaking
SUPPORTED_CHAIN_IDS = (8453, 42161, 10, 59144)


def is_native_address(address: Optional[str]) -> bool:
    if not address:
        return False
    return address.lower() in NATIVE_ADDRESSES
