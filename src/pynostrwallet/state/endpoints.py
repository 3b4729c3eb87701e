"""Ordered, duplicate-free endpoint lists."""

from __future__ import annotations

from collections.abc import Iterator

from pynostrwallet.models.wallet_data import normalize_url


class EndpointSet:
    """View over a document's URL list that only ever appends new URLs.

    The backing list is shared with the wallet document, so additions are
    visible to the next :meth:`WalletStore.save`.
    """

    def __init__(self, urls: list[str]) -> None:
        self._urls = urls

    def add(self, url: str) -> bool:
        """Append *url* unless already present.  Returns ``True`` if added."""
        normalized = normalize_url(url)
        if not normalized:
            raise ValueError("endpoint URL must be non-empty")
        if normalized in self._urls:
            return False
        self._urls.append(normalized)
        return True

    def snapshot(self) -> tuple[str, ...]:
        return tuple(self._urls)

    def first(self) -> str | None:
        return self._urls[0] if self._urls else None

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and normalize_url(url) in self._urls

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._urls))

    def __len__(self) -> int:
        return len(self._urls)

    def __repr__(self) -> str:
        return f"EndpointSet({self._urls!r})"
