"""TTL-bounded mint info cache backed by the wallet document."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from pynostrwallet._constants import MINT_INFO_TTL
from pynostrwallet.exceptions import WalletPersistenceError
from pynostrwallet.models.mint_info import MintInfo
from pynostrwallet.models.wallet_data import CachedMintInfo, normalize_url
from pynostrwallet.state.store import WalletStore

_logger = logging.getLogger(__name__)

MintInfoFetcher = Callable[[str], Awaitable[MintInfo]]


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class MintInfoCache:
    """Serve mint info from the document, refreshing entries past the TTL.

    Entries live in ``store.document.mint_info_cache`` so they survive
    restarts.  Expired entries are kept until the next access replaces
    them; a failed refresh propagates and leaves the old entry untouched.
    A failed write keeps the fresh entry in memory.
    """

    def __init__(
        self,
        store: WalletStore,
        fetcher: MintInfoFetcher,
        *,
        ttl: float = MINT_INFO_TTL,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._ttl_ms = int(ttl * 1000)
        self._clock = clock

    def peek(self, mint_url: str) -> CachedMintInfo | None:
        """Return the stored entry without checking its age."""
        return self._store.document.mint_info_cache.get(normalize_url(mint_url))

    def is_fresh(self, entry: CachedMintInfo, now_ms: int | None = None) -> bool:
        now = self._clock() if now_ms is None else now_ms
        return now - entry.timestamp < self._ttl_ms

    async def get(self, mint_url: str) -> MintInfo:
        """Return mint info for *mint_url*, fetching it when missing or stale."""
        url = normalize_url(mint_url)
        entry = self._store.document.mint_info_cache.get(url)
        if entry is not None and self.is_fresh(entry):
            return entry.info

        _logger.debug("Mint info cache miss for %s", url)
        info = await self._fetcher(url)
        self._store.document.mint_info_cache[url] = CachedMintInfo(info=info, timestamp=self._clock())
        try:
            self._store.save()
        except WalletPersistenceError as exc:
            _logger.warning("Mint info for %s cached in memory only: %s", url, exc)
        return info
