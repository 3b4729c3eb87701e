"""Tool-call surface: tool definitions and a dispatcher over :class:`WalletClient`.

``call_tool`` never raises.  Each reply is the operation result as a dict
(``outcome`` plus operation fields, camelCase keys) with a human-readable
``content`` list added for chat front ends.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pynostrwallet.client import WalletClient
from pynostrwallet.models.results import ErrorKind, OperationResult, Outcome

_logger = logging.getLogger(__name__)

ToolReply = dict[str, Any]

TOOL_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": "get_balance",
        "description": "Get the total wallet balance",
        "inputSchema": {"type": "object", "properties": {}, "required": []},
    },
    {
        "name": "get_mint_balances",
        "description": "Get balance breakdown per mint",
        "inputSchema": {"type": "object", "properties": {}, "required": []},
    },
    {
        "name": "deposit",
        "description": (
            "Create a deposit invoice (bolt11) for the specified amount and mint. "
            "Returns the invoice immediately for payment. If no mint is specified, "
            "the first configured mint is used."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "amount": {"type": "number", "description": "Amount in satoshis"},
                "mintUrl": {"type": "string", "description": "Mint URL to deposit to (optional)"},
            },
            "required": ["amount"],
        },
    },
    {
        "name": "pay",
        "description": "Pay a Lightning invoice",
        "inputSchema": {
            "type": "object",
            "properties": {"bolt11": {"type": "string", "description": "Lightning invoice to pay"}},
            "required": ["bolt11"],
        },
    },
    {
        "name": "zap",
        "description": "Send a zap to a user",
        "inputSchema": {
            "type": "object",
            "properties": {
                "recipient": {"type": "string", "description": "User npub or NIP-05 identifier to zap"},
                "amount": {"type": "number", "description": "Amount in satoshis"},
                "comment": {"type": "string", "description": "Optional comment"},
            },
            "required": ["recipient", "amount"],
        },
    },
    {
        "name": "add_mint",
        "description": "Add a mint to the wallet",
        "inputSchema": {
            "type": "object",
            "properties": {"mintUrl": {"type": "string", "description": "Mint URL to add"}},
            "required": ["mintUrl"],
        },
    },
]


class _ArgumentError(ValueError):
    pass


def _text(message: str) -> list[dict[str, str]]:
    return [{"type": "text", "text": message}]


def _reply(result: OperationResult, success_text: str) -> ToolReply:
    reply = result.to_dict()
    if result.ok:
        reply["content"] = _text(success_text)
    else:
        reply["content"] = _text(f"{result.outcome.value}: {result.error or 'unknown error'}")
    return reply


def _failed(message: str, kind: ErrorKind = ErrorKind.INVALID_ARGUMENT) -> ToolReply:
    return {
        "outcome": Outcome.FAILED.value,
        "error": message,
        "errorKind": kind.value,
        "content": _text(message),
    }


def _require(arguments: Mapping[str, Any], key: str) -> Any:
    value = arguments.get(key)
    if value is None or value == "":
        raise _ArgumentError(f"{key} is required")
    return value


def _amount(arguments: Mapping[str, Any]) -> int:
    value = _require(arguments, "amount")
    if isinstance(value, bool):
        raise _ArgumentError(f"amount must be a number, got {value!r}")
    try:
        amount = int(value)
    except (TypeError, ValueError) as exc:
        raise _ArgumentError(f"amount must be a number, got {value!r}") from exc
    if amount != value and not isinstance(value, str):
        raise _ArgumentError(f"amount must be a whole number of sats, got {value!r}")
    return amount


async def _get_balance(client: WalletClient, _args: Mapping[str, Any]) -> ToolReply:
    result = await client.get_balance()
    return _reply(result, f"Total balance: {result.balance} sats")


async def _get_mint_balances(client: WalletClient, _args: Mapping[str, Any]) -> ToolReply:
    result = await client.get_mint_balances()
    lines = ["Balance per mint:"]
    lines.extend(f"  {mint}: {balance} sats" for mint, balance in result.balances.items())
    lines.append(f"Total: {result.total} sats")
    return _reply(result, "\n".join(lines))


async def _deposit(client: WalletClient, args: Mapping[str, Any]) -> ToolReply:
    result = await client.create_deposit_invoice(_amount(args), args.get("mintUrl") or None)
    return _reply(result, f"Deposit invoice created. Pay this invoice: {result.invoice}")


async def _pay(client: WalletClient, args: Mapping[str, Any]) -> ToolReply:
    result = await client.pay(str(_require(args, "bolt11")))
    return _reply(result, "Payment successful")


async def _zap(client: WalletClient, args: Mapping[str, Any]) -> ToolReply:
    recipient = str(_require(args, "recipient"))
    amount = _amount(args)
    result = await client.zap(recipient, amount, str(args.get("comment") or ""))
    return _reply(result, f"Successfully zapped {amount} sats to {recipient}")


async def _add_mint(client: WalletClient, args: Mapping[str, Any]) -> ToolReply:
    result = await client.add_mint(str(_require(args, "mintUrl")))
    text = f"Added mint: {result.mint_url}" if result.added else f"Mint already configured: {result.mint_url}"
    return _reply(result, text)


_HANDLERS: dict[str, Callable[[WalletClient, Mapping[str, Any]], Awaitable[ToolReply]]] = {
    "get_balance": _get_balance,
    "get_mint_balances": _get_mint_balances,
    "deposit": _deposit,
    "pay": _pay,
    "zap": _zap,
    "add_mint": _add_mint,
}


async def call_tool(client: WalletClient, name: str, arguments: Mapping[str, Any] | None = None) -> ToolReply:
    """Dispatch a tool call by *name*; failures come back as ``outcome: failed``."""
    handler = _HANDLERS.get(name)
    if handler is None:
        return _failed(f"Unknown tool: {name}")
    try:
        return await handler(client, arguments or {})
    except _ArgumentError as exc:
        return _failed(str(exc))
    except Exception as exc:
        _logger.error("Tool %s failed unexpectedly", name, exc_info=True)
        return _failed(str(exc), ErrorKind.UNEXPECTED)
