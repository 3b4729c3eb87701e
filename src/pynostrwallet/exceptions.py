"""Custom exception hierarchy for pynostrwallet."""

from __future__ import annotations

from typing import Any


class WalletError(Exception):
    """Base exception for all pynostrwallet errors."""


class WalletConfigError(WalletError):
    """Invalid or missing configuration (e.g. no mints configured, bad nsec)."""


class WalletCryptoError(WalletError):
    """Key decoding or encoding failure."""


class PersistenceCorruptError(WalletError):
    """The wallet file exists but cannot be read or parsed.

    Never surfaced to callers: the store logs it and starts from a
    fresh document.
    """


class WalletPersistenceError(WalletError):
    """The wallet document could not be written to disk."""


class WalletTransportError(WalletError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
        body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        self.body = body
        super().__init__(message)


class EndpointUnreachableError(WalletTransportError):
    """The endpoint did not respond or the connection failed."""


class MintError(WalletError):
    """A mint answered with an error document (NUT-00 ``{detail, code}``)."""

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class DepositError(WalletError):
    """A deposit could not be completed (quote expired or mint refused)."""


class RecipientNotFoundError(WalletError):
    """A zap recipient could not be resolved to a public key."""


class PaymentError(WalletError):
    """A Lightning payment or zap transfer failed."""


class AllProvidersFailedError(WalletError):
    """Every endpoint in a race failed.

    ``errors`` maps each endpoint URL to the exception its attempt raised,
    in completion order.
    """

    def __init__(self, message: str, *, errors: dict[str, BaseException]) -> None:
        self.errors = errors
        super().__init__(message)


class PendingTimeoutError(WalletError):
    """A race neither succeeded nor exhausted its endpoints before the deadline.

    ``artifact`` is the first intermediate result any attempt reported
    (for deposits: the bolt11 invoice), or ``None`` if none was produced.
    """

    def __init__(
        self,
        message: str,
        *,
        artifact: Any = None,
        endpoint: str | None = None,
    ) -> None:
        self.artifact = artifact
        self.endpoint = endpoint
        super().__init__(message)
