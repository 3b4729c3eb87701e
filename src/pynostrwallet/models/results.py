"""Normalized operation results returned by :class:`WalletClient`.

Every public wallet operation returns one of these models instead of
raising.  ``outcome`` tells the four terminal states apart:

* ``success`` - the operation completed
* ``failed`` - a single directed call failed
* ``all_failed`` - every mint in a race failed
* ``timeout`` - a race was still pending at its deadline
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field

from pynostrwallet.exceptions import (
    AllProvidersFailedError,
    DepositError,
    EndpointUnreachableError,
    MintError,
    PaymentError,
    PendingTimeoutError,
    RecipientNotFoundError,
    WalletConfigError,
    WalletCryptoError,
    WalletPersistenceError,
    WalletTransportError,
)
from pynostrwallet.models._base import WalletBaseModel
from pynostrwallet.models.mint_info import MintInfo


class Outcome(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"
    ALL_FAILED = "all_failed"
    TIMEOUT = "timeout"


class ErrorKind(StrEnum):
    UNREACHABLE = "unreachable"
    NOT_FOUND = "not_found"
    CONFIGURATION = "configuration"
    MINT = "mint"
    DEPOSIT = "deposit"
    PAYMENT = "payment"
    PERSISTENCE = "persistence"
    ALL_FAILED = "all_failed"
    TIMEOUT = "timeout"
    INVALID_ARGUMENT = "invalid_argument"
    UNEXPECTED = "unexpected"


_ERROR_KINDS: tuple[tuple[type[BaseException], ErrorKind], ...] = (
    (AllProvidersFailedError, ErrorKind.ALL_FAILED),
    (PendingTimeoutError, ErrorKind.TIMEOUT),
    (EndpointUnreachableError, ErrorKind.UNREACHABLE),
    (WalletTransportError, ErrorKind.UNREACHABLE),
    (RecipientNotFoundError, ErrorKind.NOT_FOUND),
    (WalletConfigError, ErrorKind.CONFIGURATION),
    (WalletCryptoError, ErrorKind.CONFIGURATION),
    (MintError, ErrorKind.MINT),
    (DepositError, ErrorKind.DEPOSIT),
    (PaymentError, ErrorKind.PAYMENT),
    (WalletPersistenceError, ErrorKind.PERSISTENCE),
    (ValueError, ErrorKind.INVALID_ARGUMENT),
)


def error_kind_for(exc: BaseException) -> ErrorKind:
    for exc_type, kind in _ERROR_KINDS:
        if isinstance(exc, exc_type):
            return kind
    return ErrorKind.UNEXPECTED


class OperationResult(WalletBaseModel):
    outcome: Outcome = Outcome.SUCCESS
    error: str | None = None
    error_kind: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BalanceResult(OperationResult):
    balance: int = 0


class MintBalancesResult(OperationResult):
    balances: dict[str, int] = Field(default_factory=dict)
    total: int = 0


class MintInfoResult(OperationResult):
    mint_url: str
    info: MintInfo | None = None


class DepositInvoiceResult(OperationResult):
    amount: int
    mint_url: str | None = None
    invoice: str | None = None
    deposit_id: str | None = None


class DepositResult(OperationResult):
    amount: int
    mint_url: str | None = None
    invoice: str | None = None
    """Set when the race timed out with an unpaid invoice still open."""
    errors: dict[str, str] = Field(default_factory=dict)
    """Per-mint failure messages when every mint failed."""


class PaymentResult(OperationResult):
    bolt11: str
    pay_result: Any = None


class ZapResult(OperationResult):
    recipient: str
    amount: int
    comment: str = ""
    zap_result: Any = None


class AddMintResult(OperationResult):
    mint_url: str
    added: bool = False
