"""NIP-05 identifier resolution (``name@domain`` → hex public key)."""

from __future__ import annotations

import re

from pynostrwallet._transport import Transport
from pynostrwallet.exceptions import RecipientNotFoundError, WalletTransportError

_HEX_PUBKEY = re.compile(r"^[0-9a-f]{64}$")


def split_identifier(identifier: str) -> tuple[str, str]:
    """Return ``(name, domain)``; a bare domain means the ``_`` name."""
    text = identifier.strip().lower()
    if "@" in text:
        name, _, domain = text.rpartition("@")
    else:
        name, domain = "_", text
    if not name or not domain or "." not in domain:
        raise RecipientNotFoundError(f"Not a NIP-05 identifier: {identifier!r}")
    return name, domain


async def resolve_nip05(transport: Transport, identifier: str) -> str:
    """Look up *identifier* in ``https://<domain>/.well-known/nostr.json``.

    Raises
    ------
    RecipientNotFoundError
        If the host is unreachable, the name is not listed, or the
        listed key is malformed.
    """
    name, domain = split_identifier(identifier)
    url = f"https://{domain}/.well-known/nostr.json"
    try:
        payload = await transport.get_json(url, params={"name": name})
    except WalletTransportError as exc:
        raise RecipientNotFoundError(f"Failed to resolve NIP-05 identifier {identifier!r}: {exc}") from exc

    names = payload.get("names") if isinstance(payload, dict) else None
    pubkey = names.get(name) if isinstance(names, dict) else None
    if not isinstance(pubkey, str) or not _HEX_PUBKEY.match(pubkey.lower()):
        raise RecipientNotFoundError(f"Could not resolve NIP-05 identifier: {identifier}")
    return pubkey.lower()
