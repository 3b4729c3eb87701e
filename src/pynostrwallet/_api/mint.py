"""Cashu mint endpoints: info (NUT-06) and bolt11 mint quotes (NUT-04)."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pynostrwallet._constants import MINT_INFO_PATH, MINT_QUOTE_PATH, MINT_UNIT
from pynostrwallet._transport import Transport
from pynostrwallet.exceptions import MintError, WalletTransportError
from pynostrwallet.models.mint_info import MintInfo
from pynostrwallet.models.quote import MintQuote
from pynostrwallet.models.wallet_data import normalize_url

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _raise_for_error_body(exc: WalletTransportError, endpoint: str) -> None:
    """Map a NUT-00 error document (``{"detail", "code"}``) to :class:`MintError`."""
    body = exc.body
    if isinstance(body, dict) and "detail" in body:
        code = body.get("code")
        raise MintError(
            f"{endpoint} failed: {body['detail']}",
            code=code if isinstance(code, int) else None,
            endpoint=endpoint,
        ) from exc


async def _mint_call(endpoint: str, call: Awaitable[Any], model: type[M]) -> M:
    try:
        payload = await call
    except WalletTransportError as exc:
        _raise_for_error_body(exc, endpoint)
        raise
    if not isinstance(payload, dict):
        raise MintError(f"{endpoint} returned a non-object payload", endpoint=endpoint)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise MintError(f"{endpoint} returned an unexpected payload: {exc}", endpoint=endpoint) from exc


async def fetch_mint_info(transport: Transport, mint_url: str) -> MintInfo:
    """``GET {mint}/v1/info``."""
    endpoint = f"{normalize_url(mint_url)}{MINT_INFO_PATH}"
    return await _mint_call(endpoint, transport.get_json(endpoint), MintInfo)


async def request_mint_quote(
    transport: Transport,
    mint_url: str,
    amount: int,
    *,
    unit: str = MINT_UNIT,
) -> MintQuote:
    """Ask the mint for a bolt11 invoice worth *amount* units."""
    if amount <= 0:
        raise ValueError(f"amount must be positive, got {amount}")
    endpoint = f"{normalize_url(mint_url)}{MINT_QUOTE_PATH}"
    quote = await _mint_call(endpoint, transport.post_json(endpoint, {"amount": amount, "unit": unit}), MintQuote)
    _logger.debug("Mint quote %s from %s state=%s", quote.quote, mint_url, quote.state)
    return quote


async def check_mint_quote(transport: Transport, mint_url: str, quote_id: str) -> MintQuote:
    """Fetch the current state of a previously issued mint quote."""
    endpoint = f"{normalize_url(mint_url)}{MINT_QUOTE_PATH}/{quote_id}"
    return await _mint_call(endpoint, transport.get_json(endpoint), MintQuote)
