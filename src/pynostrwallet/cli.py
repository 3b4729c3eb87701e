"""Command-line front end for the wallet.

Usage
-----
::

    export NSEC="nsec1..."          # optional, otherwise read from / created in .wallet.json
    pynostrwallet get_balance
    pynostrwallet deposit 1000      # races every configured mint
    pynostrwallet deposit 1000 https://mint.example.com
    pynostrwallet zap alice@example.com 21 "thanks"

Options::

    --nsec NSEC          Identity override (highest priority)
    --wallet-file PATH   Wallet document location (default: .wallet.json)
    --json               Print the raw result as JSON
    --verbose / -v       Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any

from pynostrwallet.client import WalletClient
from pynostrwallet.config import WalletConfig
from pynostrwallet.exceptions import WalletError
from pynostrwallet.models.results import OperationResult
from pynostrwallet.tools import TOOL_DEFINITIONS

_logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pynostrwallet", description="Nostr/Cashu ecash wallet")
    parser.add_argument("--nsec", default=None, help="Nostr secret key (nsec1...) to use for this wallet")
    parser.add_argument("--wallet-file", default=None, help="Path of the wallet document")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("get_balance", help="Total wallet balance")
    commands.add_parser("get_mint_balances", help="Balance per mint")

    deposit = commands.add_parser("deposit", help="Deposit sats via a Lightning invoice")
    deposit.add_argument("amount", type=int, help="Amount in sats")
    deposit.add_argument("mint_url", nargs="?", default=None, help="Mint to use (default: race all mints)")

    pay = commands.add_parser("pay", help="Pay a Lightning invoice")
    pay.add_argument("bolt11")

    zap = commands.add_parser("zap", help="Zap an npub or NIP-05 identifier")
    zap.add_argument("recipient")
    zap.add_argument("amount", type=int, help="Amount in sats")
    zap.add_argument("comment", nargs="?", default="")

    add_mint = commands.add_parser("add_mint", help="Register a mint")
    add_mint.add_argument("mint_url")

    mint_info = commands.add_parser("mint_info", help="Show (cached) mint info")
    mint_info.add_argument("mint_url")

    commands.add_parser("tools", help="Print the tool definitions as JSON")
    return parser.parse_args(argv)


def _print_invoice(mint_url: str, invoice: str) -> None:
    print(f"Pay this invoice ({mint_url}):\n{invoice}", flush=True)


def _summary(result: OperationResult) -> str:
    if not result.ok:
        return f"{result.outcome.value}: {result.error}"
    fields: dict[str, Any] = result.to_dict()
    fields.pop("outcome", None)
    return "\n".join(f"{key}: {value}" for key, value in fields.items())


async def _dispatch(wallet: WalletClient, args: argparse.Namespace) -> OperationResult:
    command = args.command
    if command == "get_balance":
        return await wallet.get_balance()
    if command == "get_mint_balances":
        return await wallet.get_mint_balances()
    if command == "deposit":
        return await wallet.deposit(args.amount, args.mint_url)
    if command == "pay":
        return await wallet.pay(args.bolt11)
    if command == "zap":
        return await wallet.zap(args.recipient, args.amount, args.comment)
    if command == "add_mint":
        return await wallet.add_mint(args.mint_url)
    if command == "mint_info":
        return await wallet.get_mint_info(args.mint_url)
    raise ValueError(f"unknown command {command!r}")


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.wallet_file:
        overrides["wallet_file"] = args.wallet_file
    config = WalletConfig.from_env(**overrides)

    try:
        async with WalletClient(config, nsec=args.nsec, on_invoice=_print_invoice) as wallet:
            if not args.json:
                print(f"Wallet {wallet.npub}")
            result = await _dispatch(wallet, args)
    except WalletError as exc:
        _logger.error("%s", exc)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(_summary(result))
    return 0 if result.ok else 1


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "tools":
        print(json.dumps(TOOL_DEFINITIONS, indent=2))
        return 0
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
