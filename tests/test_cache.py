from __future__ import annotations

from pathlib import Path

import pytest

from pynostrwallet._cache import MintInfoCache
from pynostrwallet._crypto import generate_nsec
from pynostrwallet.exceptions import EndpointUnreachableError
from pynostrwallet.models.mint_info import MintInfo
from pynostrwallet.state.store import WalletStore

MINT = "https://mint.example.com"


class _Clock:
    def __init__(self) -> None:
        self.now_ms = 1_700_000_000_000

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)

    def __call__(self) -> int:
        return self.now_ms


class _Fetcher:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.error: Exception | None = None

    async def __call__(self, mint_url: str) -> MintInfo:
        self.calls.append(mint_url)
        if self.error is not None:
            raise self.error
        return MintInfo(name=f"mint #{len(self.calls)}")


def _store(tmp_path: Path) -> WalletStore:
    store = WalletStore(tmp_path / "wallet.json", default_mints=(MINT,), env={})
    store.open(generate_nsec())
    return store


@pytest.mark.asyncio
async def test_entry_is_reused_within_ttl_and_refetched_after(tmp_path: Path) -> None:
    clock = _Clock()
    fetcher = _Fetcher()
    cache = MintInfoCache(_store(tmp_path), fetcher, ttl=3600, clock=clock)

    first = await cache.get(MINT)
    clock.advance(1800)
    second = await cache.get(MINT)
    clock.advance(2200)  # 4000s after the first fetch
    third = await cache.get(MINT)

    assert fetcher.calls == [MINT, MINT]
    assert first.name == second.name == "mint #1"
    assert third.name == "mint #2"


@pytest.mark.asyncio
async def test_urls_are_normalized_before_lookup(tmp_path: Path) -> None:
    fetcher = _Fetcher()
    cache = MintInfoCache(_store(tmp_path), fetcher, clock=_Clock())

    await cache.get(MINT + "/")
    await cache.get(MINT)

    assert fetcher.calls == [MINT]
    assert cache.peek(MINT + "/") is not None


@pytest.mark.asyncio
async def test_fetched_entry_is_persisted(tmp_path: Path) -> None:
    clock = _Clock()
    store = _store(tmp_path)
    cache = MintInfoCache(store, _Fetcher(), clock=clock)

    await cache.get(MINT)

    reloaded = WalletStore(store.path, env={}).load()
    assert reloaded is not None
    entry = reloaded.mint_info_cache[MINT]
    assert entry.info.name == "mint #1"
    assert entry.timestamp == clock.now_ms


@pytest.mark.asyncio
async def test_failed_refresh_propagates_and_keeps_old_entry(tmp_path: Path) -> None:
    clock = _Clock()
    fetcher = _Fetcher()
    cache = MintInfoCache(_store(tmp_path), fetcher, ttl=60, clock=clock)
    await cache.get(MINT)

    clock.advance(120)
    fetcher.error = EndpointUnreachableError("down", endpoint=MINT)
    with pytest.raises(EndpointUnreachableError):
        await cache.get(MINT)

    entry = cache.peek(MINT)
    assert entry is not None
    assert entry.info.name == "mint #1"
    assert not cache.is_fresh(entry)
