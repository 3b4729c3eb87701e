"""Data models for the wallet document, mint API payloads and results."""

from pynostrwallet.models._base import WalletBaseModel
from pynostrwallet.models.mint_info import MintContact, MintInfo
from pynostrwallet.models.quote import MintQuote, QuoteState
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
from pynostrwallet.models.wallet_data import CachedMintInfo, WalletData

__all__ = [
    "AddMintResult",
    "BalanceResult",
    "CachedMintInfo",
    "DepositInvoiceResult",
    "DepositResult",
    "ErrorKind",
    "MintBalancesResult",
    "MintContact",
    "MintInfo",
    "MintInfoResult",
    "MintQuote",
    "OperationResult",
    "Outcome",
    "PaymentResult",
    "QuoteState",
    "WalletBaseModel",
    "WalletData",
    "ZapResult",
    "error_kind_for",
]
