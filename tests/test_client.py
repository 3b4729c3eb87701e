from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest

from pynostrwallet.client import WalletClient
from pynostrwallet.config import WalletConfig
from pynostrwallet.exceptions import DepositError, EndpointUnreachableError, MintError
from pynostrwallet.models.mint_info import MintInfo
from pynostrwallet.models.results import ErrorKind, Outcome
from pynostrwallet.recipients import Recipient
from pynostrwallet.state.store import WalletStore

MINT_A = "https://mint-a.example"
MINT_B = "https://mint-b.example"
MINT_C = "https://mint-c.example"
PUBKEY = "7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e"


class _FakeHandle:
    """Deposit handle that finishes with *outcome* ``delay`` seconds after start."""

    def __init__(
        self,
        mint_url: str,
        *,
        outcome: tuple[str, Any] | None = None,
        delay: float = 0.0,
        start_error: Exception | None = None,
    ) -> None:
        self._mint_url = mint_url
        self._outcome = outcome
        self._delay = delay
        self._start_error = start_error
        self._listeners: dict[str, list[Callable[[Any], None]]] = {"success": [], "error": []}
        self._result: tuple[str, Any] | None = None
        self.invoice = f"lnbc-{mint_url.rsplit('/', 1)[-1]}"
        self.cancelled = False

    @property
    def mint_url(self) -> str:
        return self._mint_url

    def on(self, event: str, callback: Callable[[Any], None]) -> None:
        if self._result is not None:
            if self._result[0] == event:
                callback(self._result[1])
            return
        self._listeners[event].append(callback)

    async def start(self) -> str:
        if self._start_error is not None:
            raise self._start_error
        if self._outcome is not None:
            asyncio.get_running_loop().call_later(self._delay, self._emit, *self._outcome)
        return self.invoice

    def cancel(self) -> None:
        self.cancelled = True
        self._emit("error", DepositError("stopped"))

    def _emit(self, event: str, payload: Any) -> None:
        if self._result is not None:
            return
        self._result = (event, payload)
        for callback in self._listeners[event]:
            callback(payload)


def _paid(delay: float) -> dict[str, Any]:
    return {"outcome": ("success", {"state": "PAID"}), "delay": delay}


def _failed(delay: float, error: Exception | None = None) -> dict[str, Any]:
    return {"outcome": ("error", error or MintError("mint refused")), "delay": delay}


class _FakeProvider:
    def __init__(self, plans: dict[str, dict[str, Any]], info: MintInfo | None = None) -> None:
        self._plans = plans
        self._info = info or MintInfo(name="fake")
        self.info_calls: list[str] = []
        self.handles: dict[str, _FakeHandle] = {}

    async def fetch_mint_info(self, mint_url: str) -> MintInfo:
        self.info_calls.append(mint_url)
        return self._info

    def deposit(self, mint_url: str, amount: int) -> _FakeHandle:
        handle = _FakeHandle(mint_url, **self._plans.get(mint_url, {}))
        self.handles[mint_url] = handle
        return handle


class _FakeTransport:
    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self._responses = responses or {}

    async def get_json(self, url: str, *, params: Mapping[str, str] | None = None) -> Any:
        response = self._responses.get(url)
        if response is None:
            raise EndpointUnreachableError("no route", endpoint=url)
        return response

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> Any:
        raise EndpointUnreachableError("no route", endpoint=url)


class _FakePayments:
    def __init__(self, result: Any) -> None:
        self._result = result
        self.calls: list[Any] = []

    async def pay_invoice(self, bolt11: str) -> Any:
        self.calls.append(bolt11)
        return self._result

    async def transfer(self, recipient: Recipient, amount_msats: int, comment: str) -> Any:
        self.calls.append((recipient.pubkey, amount_msats, comment))
        return self._result


class _BrokenBackend:
    def balance(self) -> int:
        raise RuntimeError("backend offline")

    def mint_balances(self) -> dict[str, int]:
        raise RuntimeError("backend offline")

    def credit(self, mint_url: str, amount: int) -> None:
        raise RuntimeError("backend offline")


def _client(
    tmp_path: Path,
    provider: _FakeProvider,
    *,
    mints: tuple[str, ...] = (MINT_A, MINT_B, MINT_C),
    deposit_timeout: float = 5.0,
    **kwargs: Any,
) -> WalletClient:
    config = WalletConfig(wallet_file=str(tmp_path / "wallet.json"), default_mints=mints, deposit_timeout=deposit_timeout)
    store = WalletStore.from_config(config, env={})
    kwargs.setdefault("transport", _FakeTransport())
    return WalletClient(config, store=store, provider=provider, **kwargs)


@pytest.mark.asyncio
async def test_directed_deposit_credits_the_mint(tmp_path: Path) -> None:
    invoices: list[tuple[str, str]] = []
    provider = _FakeProvider({MINT_B: _paid(0.01)})

    async with _client(tmp_path, provider, on_invoice=lambda mint, invoice: invoices.append((mint, invoice))) as wallet:
        result = await wallet.deposit(100, MINT_B)
        balances = await wallet.get_mint_balances()
        balance = await wallet.get_balance()

    assert result.outcome == Outcome.SUCCESS
    assert result.mint_url == MINT_B
    assert result.invoice == "lnbc-mint-b.example"
    assert invoices == [(MINT_B, "lnbc-mint-b.example")]
    assert balances.balances == {MINT_B: 100}
    assert balances.total == 100
    assert balance.balance == 100
    assert list(provider.handles) == [MINT_B]


@pytest.mark.asyncio
async def test_directed_failure_is_not_wrapped(tmp_path: Path) -> None:
    provider = _FakeProvider({MINT_A: _failed(0.0, MintError("quote expired"))})

    async with _client(tmp_path, provider) as wallet:
        result = await wallet.deposit(100, MINT_A)

    assert result.outcome == Outcome.FAILED
    assert result.error_kind == ErrorKind.MINT
    assert result.error == "quote expired"
    assert result.errors == {}


@pytest.mark.asyncio
async def test_directed_deposit_registers_unknown_mint(tmp_path: Path) -> None:
    new_mint = "https://new-mint.example/"
    provider = _FakeProvider({"https://new-mint.example": _paid(0.0)})

    async with _client(tmp_path, provider, mints=(MINT_A,)) as wallet:
        result = await wallet.deposit(5, new_mint)
        mints = wallet.mints

    assert result.ok
    assert mints == (MINT_A, "https://new-mint.example")


@pytest.mark.asyncio
async def test_racing_deposit_first_paid_mint_wins(tmp_path: Path) -> None:
    invoices: list[str] = []
    discarded: list[str] = []
    provider = _FakeProvider({MINT_A: _failed(0.01), MINT_B: _paid(0.05), MINT_C: _paid(0.08)})

    async with _client(
        tmp_path,
        provider,
        on_invoice=lambda mint, invoice: invoices.append(invoice),
        on_discarded=lambda endpoint, outcome: discarded.append(endpoint),
    ) as wallet:
        result = await wallet.deposit(100)
        await asyncio.sleep(0.06)
        balances = await wallet.get_mint_balances()

    assert result.outcome == Outcome.SUCCESS
    assert result.mint_url == MINT_B
    assert result.invoice == "lnbc-mint-b.example"
    assert len(invoices) == 1
    assert discarded == [MINT_C]
    # The losing mint was paid as well; its sats are credited rather than lost.
    assert balances.balances == {MINT_B: 100, MINT_C: 100}


@pytest.mark.asyncio
async def test_racing_deposit_all_failed(tmp_path: Path) -> None:
    provider = _FakeProvider(
        {
            MINT_A: _failed(0.01),
            MINT_B: {"start_error": EndpointUnreachableError("connection refused", endpoint=MINT_B)},
            MINT_C: _failed(0.02, DepositError("quote expired")),
        }
    )

    async with _client(tmp_path, provider) as wallet:
        result = await wallet.deposit(100)
        balance = await wallet.get_balance()

    assert result.outcome == Outcome.ALL_FAILED
    assert result.error_kind == ErrorKind.ALL_FAILED
    assert set(result.errors) == {MINT_A, MINT_B, MINT_C}
    assert "connection refused" in result.errors[MINT_B]
    assert balance.balance == 0


@pytest.mark.asyncio
async def test_racing_deposit_timeout_returns_first_invoice(tmp_path: Path) -> None:
    provider = _FakeProvider({})

    async with _client(tmp_path, provider, mints=(MINT_A, MINT_B), deposit_timeout=0.05) as wallet:
        result = await wallet.deposit(100)
        handles = dict(provider.handles)

    await asyncio.sleep(0.01)
    assert result.outcome == Outcome.TIMEOUT
    assert result.error_kind == ErrorKind.TIMEOUT
    assert result.invoice == handles[result.mint_url].invoice
    # Still-open deposits are only stopped when the client shuts down.
    assert all(handle.cancelled for handle in handles.values())


@pytest.mark.asyncio
async def test_racing_deposit_without_mints_is_configuration_failure(tmp_path: Path) -> None:
    async with _client(tmp_path, _FakeProvider({}), mints=()) as wallet:
        result = await wallet.deposit(100)

    assert result.outcome == Outcome.FAILED
    assert result.error_kind == ErrorKind.CONFIGURATION


@pytest.mark.asyncio
async def test_mint_that_does_not_support_sat_is_skipped(tmp_path: Path) -> None:
    info = MintInfo(nuts={"4": {"methods": [{"method": "bolt11", "unit": "usd"}]}})
    provider = _FakeProvider({MINT_A: _paid(0.0)}, info=info)

    async with _client(tmp_path, provider, mints=(MINT_A,)) as wallet:
        result = await wallet.deposit(100, MINT_A)

    assert result.error_kind == ErrorKind.MINT
    assert provider.handles == {}


@pytest.mark.asyncio
async def test_invalid_amount_is_rejected(tmp_path: Path) -> None:
    async with _client(tmp_path, _FakeProvider({})) as wallet:
        result = await wallet.deposit(0)

    assert result.outcome == Outcome.FAILED
    assert result.error_kind == ErrorKind.INVALID_ARGUMENT


@pytest.mark.asyncio
async def test_create_deposit_invoice_returns_before_payment(tmp_path: Path) -> None:
    provider = _FakeProvider({MINT_A: _paid(0.02)})

    async with _client(tmp_path, provider) as wallet:
        result = await wallet.create_deposit_invoice(42)
        before = (await wallet.get_balance()).balance
        await asyncio.sleep(0.04)
        after = (await wallet.get_balance()).balance

    assert result.ok
    assert result.mint_url == MINT_A
    assert result.invoice == "lnbc-mint-a.example"
    assert result.deposit_id is not None and result.deposit_id.startswith("deposit_")
    assert (before, after) == (0, 42)


@pytest.mark.asyncio
async def test_mint_info_is_served_from_cache(tmp_path: Path) -> None:
    provider = _FakeProvider({})

    async with _client(tmp_path, provider) as wallet:
        first = await wallet.get_mint_info(MINT_A)
        second = await wallet.get_mint_info(MINT_A + "/")

    assert first.ok and second.ok
    assert second.info is not None and second.info.name == "fake"
    assert provider.info_calls == [MINT_A]


@pytest.mark.asyncio
async def test_balances_default_to_zero_when_backend_fails(tmp_path: Path) -> None:
    async with _client(tmp_path, _FakeProvider({}), backend=_BrokenBackend()) as wallet:
        balance = await wallet.get_balance()
        balances = await wallet.get_mint_balances()

    assert balance.ok and balance.balance == 0
    assert balances.ok and balances.balances == {} and balances.total == 0


@pytest.mark.asyncio
async def test_add_mint_is_idempotent_and_persisted(tmp_path: Path) -> None:
    async with _client(tmp_path, _FakeProvider({}), mints=(MINT_A,)) as wallet:
        first = await wallet.add_mint(MINT_B + "/")
        second = await wallet.add_mint(MINT_B)
        again = await wallet.add_mint(MINT_A)

    assert (first.added, second.added, again.added) == (True, False, False)
    reloaded = WalletStore(tmp_path / "wallet.json", env={}).load()
    assert reloaded is not None
    assert reloaded.mints == [MINT_A, MINT_B]


@pytest.mark.asyncio
async def test_pay_without_payment_client_is_configuration_failure(tmp_path: Path) -> None:
    async with _client(tmp_path, _FakeProvider({})) as wallet:
        result = await wallet.pay("lnbc1...")

    assert result.outcome == Outcome.FAILED
    assert result.error_kind == ErrorKind.CONFIGURATION


@pytest.mark.asyncio
async def test_pay_reports_backend_failure(tmp_path: Path) -> None:
    payments = _FakePayments({"success": False})
    async with _client(tmp_path, _FakeProvider({}), payment_client=payments) as wallet:
        result = await wallet.pay("lnbc1...")

    assert result.error_kind == ErrorKind.PAYMENT
    assert result.pay_result == {"success": False}
    assert payments.calls == ["lnbc1..."]


@pytest.mark.asyncio
async def test_pay_success(tmp_path: Path) -> None:
    payments = _FakePayments({"success": True, "preimage": "00" * 32})
    async with _client(tmp_path, _FakeProvider({}), payment_client=payments) as wallet:
        result = await wallet.pay(" lnbc1... ")

    assert result.ok
    assert payments.calls == ["lnbc1..."]


@pytest.mark.asyncio
async def test_zap_to_hex_pubkey_sends_millisats(tmp_path: Path) -> None:
    transfers = _FakePayments({"success": True})
    async with _client(tmp_path, _FakeProvider({}), transfer_client=transfers) as wallet:
        result = await wallet.zap(PUBKEY, 21, "gm")

    assert result.ok
    assert transfers.calls == [(PUBKEY, 21_000, "gm")]


@pytest.mark.asyncio
async def test_zap_resolves_nip05(tmp_path: Path) -> None:
    transfers = _FakePayments({"success": True})
    transport = _FakeTransport({"https://example.com/.well-known/nostr.json": {"names": {"alice": PUBKEY}}})
    async with _client(tmp_path, _FakeProvider({}), transport=transport, transfer_client=transfers) as wallet:
        result = await wallet.zap("alice@example.com", 5)

    assert result.ok
    assert transfers.calls == [(PUBKEY, 5_000, "")]


@pytest.mark.asyncio
async def test_zap_unknown_recipient_is_not_found(tmp_path: Path) -> None:
    transfers = _FakePayments({"success": True})
    transport = _FakeTransport({"https://example.com/.well-known/nostr.json": {"names": {}}})
    async with _client(tmp_path, _FakeProvider({}), transport=transport, transfer_client=transfers) as wallet:
        result = await wallet.zap("bob@example.com", 5)

    assert result.outcome == Outcome.FAILED
    assert result.error_kind == ErrorKind.NOT_FOUND
    assert transfers.calls == []


@pytest.mark.asyncio
async def test_results_serialize_with_camel_case_keys(tmp_path: Path) -> None:
    provider = _FakeProvider({MINT_A: _paid(0.0)})
    async with _client(tmp_path, provider) as wallet:
        result = await wallet.create_deposit_invoice(10, MINT_A)

    payload = result.to_dict()
    assert payload["outcome"] == "success"
    assert payload["mintUrl"] == MINT_A
    assert "depositId" in payload


@pytest.mark.asyncio
async def test_add_mint_reports_unwritable_wallet_file(tmp_path: Path) -> None:
    async with _client(tmp_path, _FakeProvider({}), mints=(MINT_A,)) as wallet:
        wallet_file = wallet.store.path
        wallet_file.unlink()
        wallet_file.mkdir()

        result = await wallet.add_mint("https://new.example")

    assert result.outcome == Outcome.FAILED
    assert result.error_kind == ErrorKind.PERSISTENCE
    assert result.mint_url == "https://new.example"


@pytest.mark.asyncio
async def test_paid_deposit_succeeds_even_if_wallet_file_is_unwritable(tmp_path: Path) -> None:
    provider = _FakeProvider({MINT_A: _paid(0.01)})

    async with _client(tmp_path, provider, mints=(MINT_A,)) as wallet:
        wallet_file = wallet.store.path
        wallet_file.unlink()
        wallet_file.mkdir()

        result = await wallet.deposit(100, MINT_A)
        balance = await wallet.get_balance()

    assert result.outcome == Outcome.SUCCESS
    assert balance.balance == 100


@pytest.mark.asyncio
async def test_payment_succeeds_even_if_wallet_file_is_unwritable(tmp_path: Path) -> None:
    payments = _FakePayments({"success": True})
    async with _client(tmp_path, _FakeProvider({}), payment_client=payments) as wallet:
        wallet.store.path.unlink()
        wallet.store.path.mkdir()
        result = await wallet.pay("lnbc1...")

    assert result.ok
    assert payments.calls == ["lnbc1..."]
