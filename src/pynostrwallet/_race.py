"""Race one operation across several endpoints and keep the first success.

Every endpoint gets its own task.  The race settles exactly once, on the
first of:

* an attempt succeeding → :class:`RaceWinner`
* the last outstanding attempt failing → :class:`AllProvidersFailedError`
* the deadline passing → :class:`PendingTimeoutError` carrying the first
  artifact any attempt reported

Losing attempts are never cancelled.  They run to completion in the
background and their outcomes are handed to ``on_discarded`` (and logged)
so side effects such as extra invoices stay visible.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pynostrwallet.exceptions import AllProvidersFailedError, PendingTimeoutError, WalletConfigError

_logger = logging.getLogger(__name__)

T = TypeVar("T")

ReportArtifact = Callable[[Any], None]
Attempt = Callable[[str, ReportArtifact], Awaitable[T]]
DiscardHook = Callable[[str, Any], None]


@dataclass(frozen=True)
class RaceWinner(Generic[T]):
    endpoint: str
    value: T


class _Settle(enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    ALL_FAILED = "all_failed"
    TIMED_OUT = "timed_out"


@dataclass
class _Race(Generic[T]):
    """Book-keeping for one race.  Only touched from the event loop thread."""

    label: str
    total: int
    future: asyncio.Future[RaceWinner[T]]
    on_discarded: DiscardHook | None = None
    state: _Settle = _Settle.PENDING
    failures: int = 0
    errors: dict[str, BaseException] = field(default_factory=dict)
    artifact: tuple[str, Any] | None = None

    def _compare_and_settle(self, new_state: _Settle) -> bool:
        # No await between the check and the write: atomic on the loop.
        if self.state is not _Settle.PENDING:
            return False
        self.state = new_state
        return True

    def report(self, endpoint: str, artifact: Any) -> None:
        if self.artifact is None:
            self.artifact = (endpoint, artifact)

    def succeed(self, endpoint: str, value: T) -> None:
        if not self._compare_and_settle(_Settle.SUCCEEDED):
            self._discard(endpoint, value)
            return
        _logger.info("%s settled on %s", self.label, endpoint)
        if not self.future.done():
            self.future.set_result(RaceWinner(endpoint=endpoint, value=value))

    def fail(self, endpoint: str, exc: BaseException) -> None:
        self.failures += 1
        self.errors[endpoint] = exc
        if self.state is not _Settle.PENDING:
            self._discard(endpoint, exc)
            return
        _logger.warning("%s attempt at %s failed: %s", self.label, endpoint, exc)
        if self.failures < self.total or not self._compare_and_settle(_Settle.ALL_FAILED):
            return
        if not self.future.done():
            self.future.set_exception(
                AllProvidersFailedError(
                    f"All {self.total} endpoints failed for {self.label}",
                    errors=dict(self.errors),
                )
            )

    def expire(self) -> None:
        if not self._compare_and_settle(_Settle.TIMED_OUT):
            return
        endpoint, artifact = self.artifact if self.artifact is not None else (None, None)
        _logger.info("%s still pending at deadline", self.label)
        if not self.future.done():
            self.future.set_exception(
                PendingTimeoutError(
                    f"{self.label} did not complete before the deadline",
                    artifact=artifact,
                    endpoint=endpoint,
                )
            )

    def _discard(self, endpoint: str, outcome: Any) -> None:
        _logger.warning(
            "%s: discarding late outcome from %s after settling (%s): %r",
            self.label,
            endpoint,
            self.state.value,
            outcome,
        )
        if self.on_discarded is None:
            return
        try:
            self.on_discarded(endpoint, outcome)
        except Exception:
            _logger.warning("on_discarded hook failed", exc_info=True)


class RaceCoordinator:
    """Run the same attempt against every endpoint and settle on the first success.

    Usage::

        coordinator = RaceCoordinator()
        winner = await coordinator.run(mints, attempt, timeout=600)
    """

    def __init__(self, *, on_discarded: DiscardHook | None = None) -> None:
        self._on_discarded = on_discarded
        self._background: set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        """Attempts (from any race) that have not finished yet."""
        return len(self._background)

    async def run(
        self,
        endpoints: Sequence[str],
        attempt: Attempt[T],
        *,
        timeout: float | None = None,
        label: str = "race",
    ) -> RaceWinner[T]:
        """Race *attempt* across *endpoints*.

        Parameters
        ----------
        endpoints
            Endpoint URLs; one attempt is launched per entry.
        attempt
            ``attempt(endpoint, report_artifact)``.  Call *report_artifact*
            with any intermediate result worth surfacing on timeout.
        timeout
            Seconds until the race resolves as pending.  ``None`` waits for
            success or exhaustion.

        Raises
        ------
        WalletConfigError
            If *endpoints* is empty (nothing is launched).
        AllProvidersFailedError
            If every attempt failed.
        PendingTimeoutError
            If the deadline passed first.
        """
        targets = tuple(endpoints)
        if not targets:
            raise WalletConfigError("No mints configured. Please add a mint first.")

        loop = asyncio.get_running_loop()
        race: _Race[T] = _Race(
            label=label,
            total=len(targets),
            future=loop.create_future(),
            on_discarded=self._on_discarded,
        )
        deadline = loop.call_later(timeout, race.expire) if timeout is not None else None

        for endpoint in targets:
            task = asyncio.create_task(self._run_attempt(race, endpoint, attempt), name=f"{label}:{endpoint}")
            self._background.add(task)
            task.add_done_callback(self._background.discard)

        try:
            return await race.future
        finally:
            if deadline is not None:
                deadline.cancel()

    @staticmethod
    async def _run_attempt(race: _Race[T], endpoint: str, attempt: Attempt[T]) -> None:
        def _report(artifact: Any) -> None:
            race.report(endpoint, artifact)

        try:
            value = await attempt(endpoint, _report)
        except asyncio.CancelledError as exc:
            # A cancelled attempt counts as failed.
            race.fail(endpoint, exc)
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            return
        except Exception as exc:
            race.fail(endpoint, exc)
            return
        race.succeed(endpoint, value)
