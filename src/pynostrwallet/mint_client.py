"""Cashu mint provider client."""

from __future__ import annotations

from pynostrwallet._api.mint import fetch_mint_info
from pynostrwallet._transport import Transport
from pynostrwallet.deposit import MintDeposit
from pynostrwallet.models.mint_info import MintInfo


class CashuMintClient:
    """Default :class:`~pynostrwallet.providers.ProviderClient` over HTTP."""

    def __init__(self, transport: Transport, *, poll_interval: float = 5.0) -> None:
        self._transport = transport
        self._poll_interval = poll_interval

    async def fetch_mint_info(self, mint_url: str) -> MintInfo:
        return await fetch_mint_info(self._transport, mint_url)

    def deposit(self, mint_url: str, amount: int) -> MintDeposit:
        return MintDeposit(self._transport, mint_url, amount, poll_interval=self._poll_interval)
