"""High-level async wallet facade."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import aiohttp

from pynostrwallet._cache import MintInfoCache
from pynostrwallet._constants import MINT_METHOD, MINT_UNIT, MSATS_PER_SAT
from pynostrwallet._race import DiscardHook, RaceCoordinator, ReportArtifact
from pynostrwallet._redact import redact_for_log
from pynostrwallet._transport import HttpTransport, Transport
from pynostrwallet.config import WalletConfig
from pynostrwallet.deposit import wait_for_completion
from pynostrwallet.exceptions import (
    AllProvidersFailedError,
    MintError,
    PaymentError,
    PendingTimeoutError,
    WalletConfigError,
    WalletError,
    WalletPersistenceError,
)
from pynostrwallet.ledger import DepositLedger
from pynostrwallet.mint_client import CashuMintClient
from pynostrwallet.models.results import (
    AddMintResult,
    BalanceResult,
    DepositInvoiceResult,
    DepositResult,
    ErrorKind,
    MintBalancesResult,
    MintInfoResult,
    OperationResult,
    Outcome,
    PaymentResult,
    ZapResult,
    error_kind_for,
)
from pynostrwallet.models.wallet_data import WalletData, normalize_url
from pynostrwallet.providers import DepositHandle, PaymentClient, ProviderClient, TransferClient, WalletBackend
from pynostrwallet.recipients import RecipientResolver
from pynostrwallet.state.store import WalletStore

_logger = logging.getLogger(__name__)

R = TypeVar("R", bound=OperationResult)

InvoiceCallback = Callable[[str, str], None]


@dataclass(frozen=True)
class DepositOutcome:
    """A paid deposit as produced by one mint attempt."""

    mint_url: str
    amount: int
    invoice: str


def _reported_failure(result: Any) -> bool:
    """Whether a payment/transfer result explicitly reports ``success: false``."""
    if isinstance(result, dict):
        return result.get("success") is False
    return getattr(result, "success", None) is False


def _require_positive(amount: int, name: str = "amount") -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValueError(f"{name} must be a positive integer, got {amount!r}")


class WalletClient:
    """Async wallet facade over the state store, mint cache and race coordinator.

    Usage::

        async with WalletClient(WalletConfig.from_env(), nsec=args.nsec) as wallet:
            result = await wallet.deposit(1000)
            if result.outcome == Outcome.TIMEOUT:
                print("Still waiting for", result.invoice)

    Every operation returns a result model; nothing raises across this
    boundary.  Only ``__aenter__`` can fail (e.g. an invalid ``nsec``).
    """

    def __init__(
        self,
        config: WalletConfig | None = None,
        *,
        nsec: str | None = None,
        session: aiohttp.ClientSession | None = None,
        store: WalletStore | None = None,
        transport: Transport | None = None,
        provider: ProviderClient | None = None,
        backend: WalletBackend | None = None,
        payment_client: PaymentClient | None = None,
        transfer_client: TransferClient | None = None,
        on_invoice: InvoiceCallback | None = None,
        on_discarded: DiscardHook | None = None,
    ) -> None:
        self._config = config or WalletConfig()
        self._nsec_override = nsec
        self._external_session = session is not None
        self._http_session = session
        self._store = store or WalletStore.from_config(self._config)
        self._transport = transport
        self._provider = provider
        self._backend = backend
        self._payment_client = payment_client
        self._transfer_client = transfer_client
        self._on_invoice = on_invoice
        self._user_on_discarded = on_discarded
        self._cache: MintInfoCache | None = None
        self._resolver: RecipientResolver | None = None
        self._coordinator = RaceCoordinator(on_discarded=self._on_discarded)
        self._open_deposits: set[DepositHandle] = set()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> WalletClient:
        self._store.open(self._nsec_override)
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._http_session, timeout=self._config.http_timeout)
        if self._provider is None:
            self._provider = CashuMintClient(self._transport, poll_interval=self._config.poll_interval)
        if self._backend is None:
            self._backend = DepositLedger(self._store)
        self._cache = MintInfoCache(self._store, self._provider.fetch_mint_info)
        self._resolver = RecipientResolver(self._transport)
        _logger.debug("Wallet %s ready with %d mints", self.npub, len(self._store.mints))
        return self

    async def __aexit__(self, *exc: Any) -> None:
        for handle in list(self._open_deposits):
            cancel = getattr(handle, "cancel", None)
            if callable(cancel):
                _logger.debug("Stopping open deposit at %s", handle.mint_url)
                cancel()
        self._open_deposits.clear()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def store(self) -> WalletStore:
        return self._store

    @property
    def document(self) -> WalletData:
        return self._store.document

    @property
    def npub(self) -> str:
        return self._store.document.npub

    @property
    def mints(self) -> tuple[str, ...]:
        return self._store.mints.snapshot()

    @property
    def coordinator(self) -> RaceCoordinator:
        return self._coordinator

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_ready(self) -> tuple[ProviderClient, MintInfoCache]:
        if self._provider is None or self._cache is None:
            raise WalletError("Client not initialized. Use 'async with WalletClient(...) as wallet:'")
        return self._provider, self._cache

    def _failure(self, result_cls: type[R], exc: BaseException, **fields: Any) -> R:
        kind = error_kind_for(exc)
        if kind is ErrorKind.UNEXPECTED:
            _logger.error("%s: unexpected error", result_cls.__name__, exc_info=exc)
        else:
            _logger.warning("%s: %s", result_cls.__name__, exc)
        return result_cls(outcome=Outcome.FAILED, error=str(exc), error_kind=kind, **fields)

    def _directed_mint(self, mint_url: str | None) -> str:
        """Resolve the mint for a directed call, registering it if new."""
        mints = self._store.mints
        if mint_url is None:
            first = mints.first()
            if first is None:
                raise WalletConfigError("No mints configured. Please add a mint first.")
            return first
        if mints.add(mint_url):
            _logger.info("Added mint %s", normalize_url(mint_url))
            self._store.save()
        return normalize_url(mint_url)

    def _announce_invoice(self, mint_url: str, invoice: str) -> None:
        _logger.info("Invoice issued by %s", mint_url)
        if self._on_invoice is None:
            return
        try:
            self._on_invoice(mint_url, invoice)
        except Exception:
            _logger.warning("on_invoice callback failed", exc_info=True)

    def _save(self) -> WalletPersistenceError | None:
        """Persist the document; a write failure is logged and returned."""
        try:
            self._store.save()
        except WalletPersistenceError as exc:
            _logger.error("Wallet state not saved: %s", exc)
            return exc
        return None

    def _credit(self, mint_url: str, amount: int) -> None:
        """Credit a paid deposit.  Never raises: the sats were already received."""
        assert self._backend is not None  # noqa: S101
        try:
            self._backend.credit(mint_url, amount)
        except Exception:
            _logger.error("Could not credit %d sats from %s", amount, mint_url, exc_info=True)
            return
        self._save()

    def _on_discarded(self, endpoint: str, outcome: Any) -> None:
        # Losing invoices can still be paid; those sats are credited too.
        if isinstance(outcome, DepositOutcome):
            _logger.warning("Deposit at %s was paid after another mint won; crediting %d", endpoint, outcome.amount)
            self._credit(outcome.mint_url, outcome.amount)
        if self._user_on_discarded is not None:
            self._user_on_discarded(endpoint, outcome)

    async def _deposit_at(self, mint_url: str, amount: int, report: ReportArtifact) -> DepositOutcome:
        """Issue an invoice at one mint and wait until it is paid or fails."""
        provider, cache = self._require_ready()
        info = await cache.get(mint_url)
        if not info.supports_minting(MINT_METHOD, MINT_UNIT):
            raise MintError(f"{mint_url} does not mint {MINT_UNIT} via {MINT_METHOD}", endpoint=mint_url)

        handle = provider.deposit(mint_url, amount)
        completion = wait_for_completion(handle)
        invoice = await handle.start()
        report(invoice)
        self._open_deposits.add(handle)
        try:
            await completion
        finally:
            self._open_deposits.discard(handle)
        return DepositOutcome(mint_url=mint_url, amount=amount, invoice=invoice)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    async def get_balance(self) -> BalanceResult:
        """Total balance in sats; ``0`` if the backend cannot be queried."""
        try:
            assert self._backend is not None  # noqa: S101
            balance = self._backend.balance()
        except Exception:
            _logger.warning("Error getting balance", exc_info=True)
            balance = 0
        return BalanceResult(balance=balance)

    async def get_mint_balances(self) -> MintBalancesResult:
        """Balance per mint; empty if the backend cannot be queried."""
        try:
            assert self._backend is not None  # noqa: S101
            balances = self._backend.mint_balances()
        except Exception:
            _logger.warning("Error getting mint balances", exc_info=True)
            balances = {}
        return MintBalancesResult(balances=balances, total=sum(balances.values()))

    async def get_mint_info(self, mint_url: str) -> MintInfoResult:
        """Mint info through the TTL cache (fetched when missing or stale)."""
        url = normalize_url(mint_url)
        try:
            _provider, cache = self._require_ready()
            info = await cache.get(url)
        except Exception as exc:
            return self._failure(MintInfoResult, exc, mint_url=url)
        return MintInfoResult(mint_url=url, info=info)

    # ------------------------------------------------------------------
    # Deposits
    # ------------------------------------------------------------------

    async def create_deposit_invoice(self, amount: int, mint_url: str | None = None) -> DepositInvoiceResult:
        """Issue an invoice and return it without waiting for payment.

        Uses *mint_url* or the first configured mint.  Payment is watched
        in the background; once paid the amount is credited and saved.
        """
        mint = mint_url
        try:
            _require_positive(amount)
            provider, _cache = self._require_ready()
            mint = self._directed_mint(mint_url)
            handle = provider.deposit(mint, amount)
            invoice = await handle.start()
        except Exception as exc:
            return self._failure(DepositInvoiceResult, exc, amount=amount, mint_url=mint)

        deposit_id = f"deposit_{int(time.time() * 1000)}_{secrets.token_hex(5)}"
        self._open_deposits.add(handle)

        def _on_success(_quote: Any) -> None:
            self._open_deposits.discard(handle)
            _logger.info("Deposit %s completed successfully", deposit_id)
            self._credit(mint, amount)

        def _on_error(error: Any) -> None:
            self._open_deposits.discard(handle)
            _logger.warning("Deposit %s failed: %s", deposit_id, error)

        handle.on("success", _on_success)
        handle.on("error", _on_error)
        return DepositInvoiceResult(amount=amount, mint_url=mint, invoice=invoice, deposit_id=deposit_id)

    async def deposit(self, amount: int, mint_url: str | None = None) -> DepositResult:
        """Deposit *amount* sats and wait for the invoice to be paid.

        With *mint_url*, only that mint is used and the result is its own
        success or failure.  Without it, every configured mint issues an
        invoice concurrently; the first one announced is passed to
        ``on_invoice`` and the first paid deposit wins.  If nothing is paid
        within ``config.deposit_timeout`` the outcome is ``timeout`` with
        the first invoice attached.
        """
        try:
            _require_positive(amount)
        except ValueError as exc:
            return self._failure(DepositResult, exc, amount=amount, mint_url=mint_url)
        if mint_url is not None:
            return await self._deposit_directed(amount, mint_url)
        return await self._deposit_racing(amount)

    async def _deposit_directed(self, amount: int, mint_url: str) -> DepositResult:
        mint = normalize_url(mint_url)
        try:
            mint = self._directed_mint(mint_url)
            outcome = await self._deposit_at(
                mint,
                amount,
                lambda invoice: self._announce_invoice(mint, invoice),
            )
        except Exception as exc:
            return self._failure(DepositResult, exc, amount=amount, mint_url=mint)
        self._credit(outcome.mint_url, amount)
        return DepositResult(amount=amount, mint_url=outcome.mint_url, invoice=outcome.invoice)

    async def _deposit_racing(self, amount: int) -> DepositResult:
        announced = False

        async def _attempt(mint: str, report: ReportArtifact) -> DepositOutcome:
            def _report(invoice: str) -> None:
                nonlocal announced
                report(invoice)
                if not announced:
                    announced = True
                    self._announce_invoice(mint, invoice)

            self._store.mints.add(mint)
            return await self._deposit_at(mint, amount, _report)

        try:
            winner = await self._coordinator.run(
                self._store.mints.snapshot(),
                _attempt,
                timeout=self._config.deposit_timeout,
                label=f"deposit of {amount} sats",
            )
        except PendingTimeoutError as exc:
            _logger.info("Deposit still pending after %.0fs", self._config.deposit_timeout)
            return DepositResult(
                outcome=Outcome.TIMEOUT,
                amount=amount,
                mint_url=exc.endpoint,
                invoice=exc.artifact,
                error=str(exc),
                error_kind=ErrorKind.TIMEOUT,
            )
        except AllProvidersFailedError as exc:
            _logger.warning("%s", exc)
            return DepositResult(
                outcome=Outcome.ALL_FAILED,
                amount=amount,
                error=str(exc),
                error_kind=ErrorKind.ALL_FAILED,
                errors={url: str(err) for url, err in exc.errors.items()},
            )
        except Exception as exc:
            return self._failure(DepositResult, exc, amount=amount)

        self._credit(winner.endpoint, amount)
        return DepositResult(amount=amount, mint_url=winner.endpoint, invoice=winner.value.invoice)

    # ------------------------------------------------------------------
    # Spending
    # ------------------------------------------------------------------

    async def pay(self, bolt11: str) -> PaymentResult:
        """Pay a Lightning invoice through the configured payment client."""
        try:
            if not bolt11 or not bolt11.strip():
                raise ValueError("bolt11 invoice is required")
            if self._payment_client is None:
                raise WalletConfigError("No payment client configured")
            pay_result = await self._payment_client.pay_invoice(bolt11.strip())
        except Exception as exc:
            return self._failure(PaymentResult, exc, bolt11=bolt11)

        _logger.debug("Payment result: %s", redact_for_log(pay_result))
        self._save()
        if _reported_failure(pay_result):
            return self._failure(PaymentResult, PaymentError("Payment failed"), bolt11=bolt11, pay_result=pay_result)
        return PaymentResult(bolt11=bolt11, pay_result=pay_result)

    async def zap(self, recipient: str, amount: int, comment: str = "") -> ZapResult:
        """Send *amount* sats to an npub, hex pubkey or NIP-05 identifier."""
        try:
            _require_positive(amount)
            if self._transfer_client is None:
                raise WalletConfigError("No transfer client configured")
            if self._resolver is None:
                raise WalletError("Client not initialized. Use 'async with WalletClient(...) as wallet:'")
            target = await self._resolver.resolve(recipient)
            zap_result = await self._transfer_client.transfer(target, amount * MSATS_PER_SAT, comment)
        except Exception as exc:
            return self._failure(ZapResult, exc, recipient=recipient, amount=amount, comment=comment)

        _logger.debug("Zap result: %s", redact_for_log(zap_result))
        self._save()
        if _reported_failure(zap_result):
            return self._failure(
                ZapResult,
                PaymentError(f"Failed to zap {amount} sats to {recipient}"),
                recipient=recipient,
                amount=amount,
                comment=comment,
                zap_result=zap_result,
            )
        return ZapResult(recipient=recipient, amount=amount, comment=comment, zap_result=zap_result)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    async def add_mint(self, mint_url: str) -> AddMintResult:
        """Register a mint; already-known mints are left where they are."""
        url = normalize_url(mint_url)
        try:
            added = self._store.mints.add(mint_url)
        except Exception as exc:
            return self._failure(AddMintResult, exc, mint_url=url)
        if added:
            _logger.info("Added mint %s", url)
            error = self._save()
            if error is not None:
                return self._failure(AddMintResult, error, mint_url=url, added=True)
        return AddMintResult(mint_url=url, added=added)
