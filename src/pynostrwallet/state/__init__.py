"""State/store layer.

This package is the single owner of the persisted wallet document: the
identity, relay and mint endpoint lists, credited balances and the mint
info cache.  Everything else holds transient references only.
"""

from pynostrwallet.state.endpoints import EndpointSet
from pynostrwallet.state.store import WalletStore

__all__ = ["EndpointSet", "WalletStore"]
