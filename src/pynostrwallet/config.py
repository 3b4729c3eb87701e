"""Client configuration for pynostrwallet."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pynostrwallet._constants import DEFAULT_MINTS, DEFAULT_RELAYS, DEPOSIT_TIMEOUT, WALLET_FILE


def _env_list(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


@dataclasses.dataclass(frozen=True)
class WalletConfig:
    """Client configuration.

    The identity (nsec) is deliberately not a config field: it is resolved
    by the state store from the ``--nsec`` override, the ``NSEC``
    environment variable, the wallet file, or freshly generated.

    Parameters
    ----------
    wallet_file : str
        Path of the persisted wallet document.
    default_mints : tuple of str
        Mint URLs used when a fresh wallet document is created.
    default_relays : tuple of str
        Relay URLs used when a fresh wallet document is created.
    deposit_timeout : float
        Seconds a racing deposit waits for payment before resolving as
        pending.  Defaults to 10 minutes.
    poll_interval : float
        Seconds between mint quote state checks while a deposit is open.
    http_timeout : float
        Total timeout in seconds for a single HTTP request to a mint or
        NIP-05 host.
    """

    wallet_file: str = WALLET_FILE
    default_mints: tuple[str, ...] = DEFAULT_MINTS
    default_relays: tuple[str, ...] = DEFAULT_RELAYS
    deposit_timeout: float = DEPOSIT_TIMEOUT
    poll_interval: float = 5.0
    http_timeout: float = 10.0

    @classmethod
    def from_env(cls, **overrides: Any) -> WalletConfig:
        """Create configuration from ``WALLET_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        wallet_file = env.get("WALLET_FILE")
        if wallet_file:
            config_kwargs["wallet_file"] = wallet_file

        config_kwargs["default_mints"] = _env_list(env.get("WALLET_MINTS"), DEFAULT_MINTS)
        config_kwargs["default_relays"] = _env_list(env.get("WALLET_RELAYS"), DEFAULT_RELAYS)

        timeout_env = env.get("WALLET_DEPOSIT_TIMEOUT")
        if timeout_env is not None and "deposit_timeout" not in overrides:
            config_kwargs["deposit_timeout"] = float(timeout_env)

        poll_env = env.get("WALLET_POLL_INTERVAL")
        if poll_env is not None and "poll_interval" not in overrides:
            config_kwargs["poll_interval"] = float(poll_env)

        http_env = env.get("WALLET_HTTP_TIMEOUT")
        if http_env is not None and "http_timeout" not in overrides:
            config_kwargs["http_timeout"] = float(http_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
