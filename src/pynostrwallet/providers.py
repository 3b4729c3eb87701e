"""Collaborator interfaces consumed by :class:`WalletClient`.

Only the mint side has a concrete implementation in this package
(:class:`~pynostrwallet.mint_client.CashuMintClient`).  Spending ecash
(Lightning payments and zaps) needs proofs held by a full ecash wallet,
so those clients are injected by the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Literal, Protocol

from pynostrwallet.models.mint_info import MintInfo
from pynostrwallet.recipients import Recipient

DepositEvent = Literal["success", "error"]


class DepositHandle(Protocol):
    """A started-or-startable deposit at one mint.

    Completion is reported through two events rather than a future:
    ``"success"`` receives the paid quote, ``"error"`` the exception.
    """

    @property
    def mint_url(self) -> str: ...

    async def start(self) -> str:
        """Create the quote and return the bolt11 invoice to pay."""
        ...

    def on(self, event: DepositEvent, callback: Callable[[Any], None]) -> None: ...


class ProviderClient(Protocol):
    async def fetch_mint_info(self, mint_url: str) -> MintInfo: ...

    def deposit(self, mint_url: str, amount: int) -> DepositHandle: ...


class PaymentClient(Protocol):
    async def pay_invoice(self, bolt11: str) -> Any: ...


class TransferClient(Protocol):
    async def transfer(self, recipient: Recipient, amount_msats: int, comment: str) -> Any: ...


class WalletBackend(Protocol):
    """The active balance source queried by the read-only operations."""

    def balance(self) -> int: ...

    def mint_balances(self) -> dict[str, int]: ...

    def credit(self, mint_url: str, amount: int) -> None: ...
