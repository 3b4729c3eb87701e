"""pynostrwallet - Async Nostr/Cashu ecash wallet with multi-mint deposit racing."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pynostrwallet")
except PackageNotFoundError:
    __version__ = "0+local"
from pynostrwallet._race import RaceCoordinator, RaceWinner
from pynostrwallet.client import DepositOutcome, WalletClient
from pynostrwallet.config import WalletConfig
from pynostrwallet.exceptions import (
    AllProvidersFailedError,
    DepositError,
    EndpointUnreachableError,
    MintError,
    PaymentError,
    PendingTimeoutError,
    PersistenceCorruptError,
    RecipientNotFoundError,
    WalletConfigError,
    WalletCryptoError,
    WalletError,
    WalletPersistenceError,
    WalletTransportError,
)
from pynostrwallet.models import (
    AddMintResult,
    BalanceResult,
    DepositInvoiceResult,
    DepositResult,
    ErrorKind,
    MintBalancesResult,
    MintInfo,
    MintInfoResult,
    MintQuote,
    Outcome,
    PaymentResult,
    WalletData,
    ZapResult,
)
from pynostrwallet.state import EndpointSet, WalletStore

__all__ = [
    "__version__",
    "AddMintResult",
    "AllProvidersFailedError",
    "BalanceResult",
    "DepositError",
    "DepositInvoiceResult",
    "DepositOutcome",
    "DepositResult",
    "EndpointSet",
    "EndpointUnreachableError",
    "ErrorKind",
    "MintBalancesResult",
    "MintError",
    "MintInfo",
    "MintInfoResult",
    "MintQuote",
    "Outcome",
    "PaymentError",
    "PaymentResult",
    "PendingTimeoutError",
    "PersistenceCorruptError",
    "RaceCoordinator",
    "RaceWinner",
    "RecipientNotFoundError",
    "WalletClient",
    "WalletConfig",
    "WalletConfigError",
    "WalletCryptoError",
    "WalletData",
    "WalletError",
    "WalletPersistenceError",
    "WalletStore",
    "WalletTransportError",
    "ZapResult",
]
