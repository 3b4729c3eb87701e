"""Mint deposits: issue a bolt11 quote, then watch it until paid or expired."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

from pynostrwallet._api.mint import check_mint_quote, request_mint_quote
from pynostrwallet._transport import Transport
from pynostrwallet.exceptions import DepositError, MintError, WalletTransportError
from pynostrwallet.models.quote import MintQuote
from pynostrwallet.models.wallet_data import normalize_url
from pynostrwallet.providers import DepositEvent, DepositHandle

_logger = logging.getLogger(__name__)


class MintDeposit:
    """A single deposit at one mint.

    :meth:`start` requests the quote and returns the invoice; a background
    task then polls the quote and fires exactly one of the ``"success"``
    (paid :class:`MintQuote`) or ``"error"`` (exception) events.  Polling
    errors are treated as transient until the quote expires.

    Listeners registered after completion are called immediately with the
    recorded result.
    """

    def __init__(
        self,
        transport: Transport,
        mint_url: str,
        amount: int,
        *,
        poll_interval: float = 5.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._transport = transport
        self._mint_url = normalize_url(mint_url)
        self._amount = amount
        self._poll_interval = poll_interval
        self._clock = clock
        self._listeners: dict[DepositEvent, list[Callable[[Any], None]]] = {"success": [], "error": []}
        self._quote: MintQuote | None = None
        self._task: asyncio.Task[None] | None = None
        self._result: tuple[DepositEvent, Any] | None = None

    @property
    def mint_url(self) -> str:
        return self._mint_url

    @property
    def amount(self) -> int:
        return self._amount

    @property
    def quote(self) -> MintQuote | None:
        return self._quote

    @property
    def done(self) -> bool:
        return self._result is not None

    def on(self, event: DepositEvent, callback: Callable[[Any], None]) -> None:
        if event not in self._listeners:
            raise ValueError(f"unknown deposit event {event!r}")
        if self._result is not None:
            if self._result[0] == event:
                self._invoke(event, callback, self._result[1])
            return
        self._listeners[event].append(callback)

    async def start(self) -> str:
        if self._quote is not None:
            raise DepositError(f"deposit at {self._mint_url} already started")
        self._quote = await request_mint_quote(self._transport, self._mint_url, self._amount)
        self._task = asyncio.create_task(self._watch(), name=f"deposit:{self._mint_url}:{self._quote.quote}")
        return self._quote.request

    def cancel(self) -> None:
        """Stop watching the quote (used when the owning client shuts down).

        Listeners waiting on the deposit receive an ``"error"`` event.
        """
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._emit("error", DepositError(f"Stopped watching deposit at {self._mint_url}"))

    async def _watch(self) -> None:
        quote = self._quote
        assert quote is not None  # noqa: S101
        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                quote = await check_mint_quote(self._transport, self._mint_url, quote.quote)
            except MintError as exc:
                self._emit("error", exc)
                return
            except WalletTransportError:
                _logger.debug("Quote poll for %s failed; retrying", self._mint_url, exc_info=True)

            if quote.is_paid:
                _logger.info("Deposit of %d at %s paid (quote %s)", self._amount, self._mint_url, quote.quote)
                self._emit("success", quote)
                return
            if quote.is_expired(self._clock()):
                self._emit("error", DepositError(f"Quote {quote.quote} at {self._mint_url} expired unpaid"))
                return

    def _emit(self, event: DepositEvent, payload: Any) -> None:
        if self._result is not None:
            return
        self._result = (event, payload)
        listeners = self._listeners
        self._listeners = {"success": [], "error": []}
        for callback in listeners[event]:
            self._invoke(event, callback, payload)

    def _invoke(self, event: DepositEvent, callback: Callable[[Any], None], payload: Any) -> None:
        try:
            callback(payload)
        except Exception:
            _logger.warning("Deposit %s listener failed for %s", event, self._mint_url, exc_info=True)


def wait_for_completion(handle: DepositHandle) -> asyncio.Future[Any]:
    """Bridge a handle's ``success``/``error`` events into a future."""
    future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()

    def _on_success(payload: Any) -> None:
        if not future.done():
            future.set_result(payload)

    def _on_error(error: Any) -> None:
        if future.done():
            return
        if isinstance(error, BaseException):
            future.set_exception(error)
        else:
            future.set_exception(DepositError(f"deposit at {handle.mint_url} failed: {error}"))

    handle.on("success", _on_success)
    handle.on("error", _on_error)
    return future
