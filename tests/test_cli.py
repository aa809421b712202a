import json

import pytest

from bridger.cli import build_parser, main
from bridger.config import Settings
from helpers import TEST_PRIVATE_KEY


def _settings(tmp_path, **overrides):
    return Settings(_env_file=None, wallet_file=str(tmp_path / "wallets.json"), **overrides)


def test_parser_checksums_addresses():
    args = build_parser().parse_args(["balances", "0x000000000000000000000000000000000000beef"])

    assert args.address == "0x000000000000000000000000000000000000bEEF"


def test_parser_rejects_bad_address():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["withdraw", "--to", "not-an-address"])


def test_max_cycles_rejects_negative():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["run", "--max-cycles", "-1"])


def test_max_cycles_accepts_zero():
    assert build_parser().parse_args(["run", "--max-cycles", "0"]).max_cycles == 0


def test_topup_addresses_repeat():
    args = build_parser().parse_args([
        "topup",
        "--address", "0x000000000000000000000000000000000000beef",
        "--address", "0x000000000000000000000000000000000000cafe",
        "--yes",
    ])

    assert len(args.addresses) == 2
    assert args.yes


@pytest.mark.asyncio
async def test_no_command_prints_help(tmp_path, capsys):
    assert await main([], settings=_settings(tmp_path)) == 0
    assert "usage" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_generate_writes_wallet_file(tmp_path):
    settings = _settings(tmp_path)

    assert await main(["generate", "--count", "2"], settings=settings) == 0

    stored = json.loads((tmp_path / "wallets.json").read_text(encoding="utf-8"))
    assert len(stored) == 2
    assert all(entry["active"] for entry in stored)


@pytest.mark.asyncio
async def test_generate_refuses_to_overwrite(tmp_path):
    settings = _settings(tmp_path)
    path = tmp_path / "wallets.json"
    path.write_text("[]", encoding="utf-8")

    assert await main(["generate", "--count", "1"], settings=settings) == 1
    assert path.read_text(encoding="utf-8") == "[]"


@pytest.mark.asyncio
async def test_generate_append(tmp_path, account):
    settings = _settings(tmp_path)
    path = tmp_path / "wallets.json"
    path.write_text(json.dumps([{"address": account.address, "privateKey": TEST_PRIVATE_KEY}]), encoding="utf-8")

    assert await main(["generate", "--count", "1", "--append"], settings=settings) == 0

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert [entry["address"] for entry in stored][0] == account.address
    assert len(stored) == 2


@pytest.mark.asyncio
async def test_run_with_missing_wallet_file_fails(tmp_path):
    assert await main(["run", "--max-cycles", "1"], settings=_settings(tmp_path, oneinch_api_key="key")) == 1


@pytest.mark.asyncio
async def test_run_without_swap_key_fails(tmp_path, account):
    (tmp_path / "wallets.json").write_text(
        json.dumps([{"address": account.address, "privateKey": TEST_PRIVATE_KEY}]),
        encoding="utf-8",
    )

    assert await main(["run", "--max-cycles", "1"], settings=_settings(tmp_path, oneinch_api_key="")) == 1
