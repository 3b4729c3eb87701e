"""Persisted wallet document (``.wallet.json``)."""

from __future__ import annotations

from pydantic import Field, field_validator

from pynostrwallet.models._base import WalletBaseModel
from pynostrwallet.models.mint_info import MintInfo


def normalize_url(url: str) -> str:
    """Canonical form used for endpoint identity: trimmed, no trailing slash."""
    return url.strip().rstrip("/")


def dedupe_urls(urls: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for url in urls:
        normalized = normalize_url(url)
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        result.append(normalized)
    return result


class CachedMintInfo(WalletBaseModel):
    """A cached mint info document and when it was fetched."""

    info: MintInfo
    timestamp: int
    """Fetch time in epoch milliseconds."""


class WalletData(WalletBaseModel):
    """The single document the state store owns.

    Serialized with camelCase keys (``mintInfoCache``, ``mintBalances``).
    """

    nsec: str
    npub: str
    balance: int = 0
    """Balance hint: sum of ``mint_balances`` at the last save."""
    mint_balances: dict[str, int] = Field(default_factory=dict)
    """Amounts (sats) credited per mint by confirmed deposits."""
    relays: list[str] = Field(default_factory=list)
    mints: list[str] = Field(default_factory=list)
    mint_info_cache: dict[str, CachedMintInfo] = Field(default_factory=dict)

    @field_validator("relays", "mints")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return dedupe_urls(value)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2, exclude_none=True)
