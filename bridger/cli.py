"""Command line entry point for bridger."""

import argparse
import asyncio
import getpass
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

from eth_account import Account
from eth_utils import is_address, to_checksum_address
from pydantic import ValidationError

from .config import Settings, load_settings
from .core.cycle.runner import CycleRunner
from .core.errors import BridgerError, FatalError
from .logging_config import setup_logging
from .services.balances import AccountBalanceSnapshot
from .services.wallets import active_wallets, generate_wallets, load_wallets, save_wallets
from .wiring import Services, build_services

logger = logging.getLogger(__name__)


def print_snapshot(snapshot: AccountBalanceSnapshot) -> None:
    """Pretty print a balance snapshot"""
    print(f"\n💼 Balances for {snapshot.owner}")
    print("=" * 50)
    for chain in snapshot.chains.values():
        print(f"\n{chain.name} ({chain.chain_id})")
        print("-" * 50)
        entries = [chain.native, *chain.tokens.values()]
        for entry in entries:
            if entry.error:
                print(f"  {entry.symbol:<6} ⚠️  unavailable ({entry.error})")
            else:
                print(f"  {entry.symbol:<6} {entry.formatted:>20}")


def confirm(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ").strip().lower()
    return answer in {"y", "yes"}


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater: {value}")
    return number


def _address(value: str) -> str:
    if not is_address(value):
        raise argparse.ArgumentTypeError(f"invalid address: {value}")
    return to_checksum_address(value)


async def cli_run(services: Services, max_cycles: Optional[int], seed: Optional[int]) -> int:
    settings = services.settings
    wallets = load_wallets(settings.wallet_file)
    rng = random.Random(seed)
    runner = CycleRunner(
        services.cycle(rng=rng),
        wallets,
        interval_min_minutes=settings.interval_min,
        interval_max_minutes=settings.interval_max,
        rng=rng,
    )
    print(f"🚀 Starting bridge cycles with {len(active_wallets(wallets))} active wallets")
    summary = await runner.run(max_cycles=max_cycles)
    print(f"✅ Finished {summary.cycles} cycles")
    return 0


async def cli_balances(services: Services, address: str) -> int:
    print(f"🔍 Reading balances for {address}...")
    snapshot = await services.balances.snapshot(address)
    print_snapshot(snapshot)
    return 0


def cli_generate(path: str, count: int, append: bool) -> int:
    wallet_path = Path(path)
    if wallet_path.exists() and not append:
        print(f"❌ {wallet_path} already exists; use --append to add wallets")
        return 1
    existing = load_wallets(wallet_path) if wallet_path.exists() else []
    created = generate_wallets(count)
    save_wallets(wallet_path, [*existing, *created])
    print(f"🔑 Generated {len(created)} wallets into {wallet_path}")
    for wallet in created:
        print(f"  {wallet.address}")
    return 0


async def cli_withdraw(services: Services, destination: str, assume_yes: bool) -> int:
    wallets = load_wallets(services.settings.wallet_file)
    if not assume_yes and not confirm(f"Withdraw all funds from {len(wallets)} wallets to {destination}?"):
        print("Aborted")
        return 1
    report = await services.withdraw().withdraw_all(wallets, destination)
    print(f"✅ {report.success_count} transfers succeeded, ❌ {report.failure_count} failed")
    return 0 if report.failure_count == 0 else 2


async def cli_topup(services: Services, addresses: List[str], assume_yes: bool) -> int:
    settings = services.settings
    if not addresses:
        addresses = [wallet.address for wallet in active_wallets(load_wallets(settings.wallet_file))]

    private_key = settings.funding_private_key or getpass.getpass("Funding wallet private key: ")
    funder = Account.from_key(private_key.strip())

    service = services.topup()
    check = await service.check_funding(funder.address, len(addresses))
    print(f"💰 Funding wallet {funder.address}: {check.available} / {check.required} USDC base units needed")
    if not check.sufficient:
        print("❌ Funding wallet balance is too low")
        return 1
    if not assume_yes and not confirm(f"Fund {len(addresses)} wallets?"):
        print("Aborted")
        return 1

    report = await service.top_up_all(funder, addresses, check=check)
    print(f"✅ {report.success_count} swaps succeeded, ❌ {report.failure_count} failed")
    return 0 if report.failure_count == 0 else 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bridger", description="Cross-chain swap and bridge cycles")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run bridge cycles on a random timer")
    run_parser.add_argument("--max-cycles", type=_non_negative_int, default=None, help="Stop after N cycles")
    run_parser.add_argument("--seed", type=int, default=None, help="Seed for wallet/destination/interval choice")

    balances_parser = subparsers.add_parser("balances", help="Show tracked balances on every chain")
    balances_parser.add_argument("address", type=_address, help="Wallet address")

    generate_parser = subparsers.add_parser("generate", help="Create new wallets")
    generate_parser.add_argument("--count", type=int, required=True, help="Number of wallets")
    generate_parser.add_argument("--append", action="store_true", help="Append to an existing wallet file")
    generate_parser.add_argument("--output", default=None, help="Wallet file (default: WALLET_FILE)")

    withdraw_parser = subparsers.add_parser("withdraw", help="Sweep all wallets to one address")
    withdraw_parser.add_argument("--to", dest="destination", type=_address, required=True, help="Destination address")
    withdraw_parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    topup_parser = subparsers.add_parser("topup", help="Fund wallets with ETH and WETH from a USDC wallet")
    topup_parser.add_argument("--address", dest="addresses", type=_address, action="append", default=[],
                              help="Wallet to fund (repeatable; default: all active wallets)")
    topup_parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    return parser


async def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        settings = settings or load_settings()
    except ValidationError as exc:
        print(f"❌ Invalid configuration: {exc}")
        return 1

    setup_logging(settings.log_level, settings.log_format)

    if args.command == "generate":
        if args.count < 1:
            print("❌ --count must be positive")
            return 1
        try:
            return cli_generate(args.output or settings.wallet_file, args.count, args.append)
        except FatalError as exc:
            print(f"❌ {exc}")
            return 1

    services = build_services(settings)
    try:
        if args.command == "run":
            return await cli_run(services, args.max_cycles, args.seed)
        if args.command == "balances":
            return await cli_balances(services, args.address)
        if args.command == "withdraw":
            return await cli_withdraw(services, args.destination, args.yes)
        if args.command == "topup":
            return await cli_topup(services, args.addresses, args.yes)
    except FatalError as exc:
        logger.error("Fatal: %s", exc)
        print(f"❌ {exc}")
        return 1
    except BridgerError as exc:
        print(f"❌ {exc}")
        return 1
    finally:
        await services.close()

    parser.print_help()
    return 1


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n👋 Stopped")
        sys.exit(130)


if __name__ == "__main__":
    run()
