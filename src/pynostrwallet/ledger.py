"""Per-mint balance ledger kept in the wallet document."""

from __future__ import annotations

from pynostrwallet.models.wallet_data import normalize_url
from pynostrwallet.state.store import WalletStore


class DepositLedger:
    """Default :class:`~pynostrwallet.providers.WalletBackend`.

    Tracks the sats credited by confirmed deposits per mint.  Mutations
    are in-memory; the caller saves the store.
    """

    def __init__(self, store: WalletStore) -> None:
        self._store = store

    def balance(self) -> int:
        return sum(self._store.document.mint_balances.values())

    def mint_balances(self) -> dict[str, int]:
        return dict(self._store.document.mint_balances)

    def credit(self, mint_url: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError(f"credit amount must be positive, got {amount}")
        document = self._store.document
        url = normalize_url(mint_url)
        document.mint_balances[url] = document.mint_balances.get(url, 0) + amount
        document.balance = sum(document.mint_balances.values())
