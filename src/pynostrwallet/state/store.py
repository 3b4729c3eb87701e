"""Persistent wallet document store.

This is the only component that reads or writes the wallet file.  The
document is always rewritten in full; the last complete write wins and
no locking is attempted (one live process per wallet file).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path

from pydantic import ValidationError

from pynostrwallet._constants import DEFAULT_MINTS, DEFAULT_RELAYS, NSEC_ENV_VAR
from pynostrwallet._crypto import IdentityCodec, NostrIdentityCodec
from pynostrwallet.config import WalletConfig
from pynostrwallet._redact import redact_for_log
from pynostrwallet.exceptions import (
    PersistenceCorruptError,
    WalletConfigError,
    WalletCryptoError,
    WalletError,
    WalletPersistenceError,
)
from pynostrwallet.models.wallet_data import WalletData
from pynostrwallet.state.endpoints import EndpointSet

_logger = logging.getLogger(__name__)

IdentityResolver = Callable[[], str | None]


class WalletStore:
    """Load, reconcile and save the wallet document.

    Usage::

        store = WalletStore(Path(".wallet.json"))
        document = store.open(nsec_override=args.nsec)
        store.mints.add("https://mint.example.com")
        store.save()
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        default_mints: tuple[str, ...] = DEFAULT_MINTS,
        default_relays: tuple[str, ...] = DEFAULT_RELAYS,
        identity: IdentityCodec | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._path = Path(path)
        self._default_mints = default_mints
        self._default_relays = default_relays
        self._identity = identity or NostrIdentityCodec()
        self._env = env if env is not None else os.environ
        self._document: WalletData | None = None

    @classmethod
    def from_config(cls, config: WalletConfig, **kwargs: object) -> WalletStore:
        return cls(
            config.wallet_file,
            default_mints=config.default_mints,
            default_relays=config.default_relays,
            **kwargs,  # type: ignore[arg-type]
        )

    @property
    def path(self) -> Path:
        return self._path

    @property
    def document(self) -> WalletData:
        if self._document is None:
            raise WalletError("Wallet store not opened. Call store.open() first.")
        return self._document

    @property
    def mints(self) -> EndpointSet:
        return EndpointSet(self.document.mints)

    @property
    def relays(self) -> EndpointSet:
        return EndpointSet(self.document.relays)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _read(self) -> WalletData:
        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceCorruptError(f"cannot read {self._path}: {exc}") from exc
        try:
            return WalletData.model_validate_json(text)
        except ValidationError as exc:
            raise PersistenceCorruptError(f"invalid wallet document in {self._path}: {exc}") from exc

    def load(self) -> WalletData | None:
        """Return the persisted document, or ``None`` if absent or unusable."""
        if not self._path.exists():
            return None
        try:
            return self._read()
        except PersistenceCorruptError as exc:
            _logger.warning("Ignoring wallet file, starting fresh: %s", exc)
            return None

    def resolve_identity(self, nsec_override: str | None, loaded: WalletData | None) -> str:
        """Pick the nsec: explicit override, ``NSEC`` env var, persisted, new."""
        resolvers: list[IdentityResolver] = [
            lambda: nsec_override,
            lambda: self._env.get(NSEC_ENV_VAR),
            lambda: self._persisted_nsec(loaded),
            self._identity.generate,
        ]
        for resolver in resolvers:
            candidate = resolver()
            if candidate and candidate.strip():
                return candidate.strip()
        raise WalletConfigError("no identity could be resolved")  # pragma: no cover

    def _identity_matches(self, document: WalletData) -> bool:
        """Whether the document's nsec decodes to its stored npub."""
        try:
            return self._identity.decode(document.nsec) == document.npub
        except WalletCryptoError:
            return False

    def _persisted_nsec(self, loaded: WalletData | None) -> str | None:
        if loaded is None:
            return None
        if not self._identity_matches(loaded):
            _logger.warning("Ignoring unusable identity in %s; a new one will be used", self._path)
            return None
        return loaded.nsec

    def _new_document(self, nsec: str) -> WalletData:
        try:
            npub = self._identity.decode(nsec)
        except WalletCryptoError as exc:
            raise WalletConfigError(f"invalid nsec: {exc}") from exc
        return WalletData(
            nsec=nsec,
            npub=npub,
            relays=list(self._default_relays),
            mints=list(self._default_mints),
        )

    def reconcile(self, loaded: WalletData | None, nsec: str) -> WalletData:
        """Return the document to use for *nsec*.

        A loaded document with the same, consistent identity is used as
        is.  Otherwise a fresh
        document is built; when one was loaded, its relays, mints, credited
        balances and mint info cache are carried over so rotating the
        identity keeps the accumulated configuration.
        """
        if loaded is not None and loaded.nsec == nsec and self._identity_matches(loaded):
            return loaded

        document = self._new_document(nsec)
        if loaded is not None:
            _logger.info("Identity changed; carrying over %d mints and %d relays", len(loaded.mints), len(loaded.relays))
            document.relays = list(loaded.relays)
            document.mints = list(loaded.mints)
            document.mint_balances = dict(loaded.mint_balances)
            document.balance = sum(document.mint_balances.values())
            document.mint_info_cache = dict(loaded.mint_info_cache)
        return document

    def open(self, nsec_override: str | None = None) -> WalletData:
        """Load, resolve the identity and reconcile; saves if anything changed."""
        loaded = self.load()
        nsec = self.resolve_identity(nsec_override, loaded)
        document = self.reconcile(loaded, nsec)
        self._document = document
        if document is not loaded:
            self.save()
        _logger.debug("Wallet opened from %s: %s", self._path, redact_for_log(document))
        return document

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def save(self) -> None:
        """Rewrite the whole document (temp file + rename).

        Raises
        ------
        WalletPersistenceError
            If the file cannot be written.
        """
        if self._document is None:
            return
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(self._document.to_json(), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            raise WalletPersistenceError(f"cannot write {self._path}: {exc}") from exc
