"""
Wallet store.

Wallets live in a plain JSON file: a list of ``{"address", "privateKey", "active"}``
objects. ``active`` defaults to true when omitted.
"""

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Union

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import is_address, to_checksum_address, to_hex

from ..core.errors import NoActiveWalletsError, WalletStoreError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class WalletRecord:
    address: str
    private_key: str = field(repr=False)
    active: bool = True

    def account(self) -> LocalAccount:
        return Account.from_key(self.private_key)

    def to_dict(self) -> dict:
        return {"address": self.address, "privateKey": self.private_key, "active": self.active}


def _parse_entry(index: int, entry: object) -> WalletRecord:
    if not isinstance(entry, dict):
        raise WalletStoreError(f"Wallet entry {index} is not an object")
    address = entry.get("address")
    private_key = entry.get("privateKey")
    if not address or not private_key:
        raise WalletStoreError(f"Wallet entry {index} is missing address or privateKey")
    if not is_address(address):
        raise WalletStoreError(f"Wallet entry {index} has an invalid address")
    active = entry.get("active", True)
    return WalletRecord(address=to_checksum_address(address), private_key=private_key, active=bool(active))


def load_wallets(path: PathLike) -> List[WalletRecord]:
    """Load and validate the wallet file."""
    wallet_path = Path(path)
    if not wallet_path.exists():
        raise WalletStoreError(f"Wallet file not found: {wallet_path}")
    try:
        data = json.loads(wallet_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise WalletStoreError(f"Could not read wallet file {wallet_path}: {exc}") from exc

    if not isinstance(data, list) or not data:
        raise WalletStoreError(f"Wallet file {wallet_path} must contain a non-empty list")

    wallets = [_parse_entry(index, entry) for index, entry in enumerate(data)]
    logger.info("Loaded %d wallets from %s", len(wallets), wallet_path)
    return wallets


def save_wallets(path: PathLike, wallets: Sequence[WalletRecord]) -> None:
    wallet_path = Path(path)
    wallet_path.write_text(
        json.dumps([wallet.to_dict() for wallet in wallets], indent=2) + "\n",
        encoding="utf-8",
    )


def generate_wallets(count: int) -> List[WalletRecord]:
    """Create ``count`` fresh wallets."""
    if count < 1:
        raise ValueError("count must be at least 1")
    wallets = []
    for _ in range(count):
        account = Account.create()
        wallets.append(WalletRecord(address=account.address, private_key=to_hex(account.key), active=True))
    return wallets


def active_wallets(wallets: Sequence[WalletRecord]) -> List[WalletRecord]:
    return [wallet for wallet in wallets if wallet.active]


def pick_active(wallets: Sequence[WalletRecord], rng: random.Random) -> WalletRecord:
    """Choose an active wallet uniformly at random."""
    candidates = active_wallets(wallets)
    if not candidates:
        raise NoActiveWalletsError()
    return rng.choice(candidates)
