"""Zap recipient resolution: ``npub``, 64-char hex, or NIP-05."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from pynostrwallet._api.nip05 import resolve_nip05
from pynostrwallet._crypto import decode_npub, encode_npub
from pynostrwallet._transport import Transport
from pynostrwallet.exceptions import RecipientNotFoundError, WalletCryptoError

_HEX_PUBKEY = re.compile(r"^[0-9a-fA-F]{64}$")


class Recipient(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str
    """What the caller passed in."""
    pubkey: str
    """Lowercase hex public key."""
    npub: str


class RecipientResolver:
    """Turn a user-supplied identifier into a :class:`Recipient`."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def resolve(self, identifier: str) -> Recipient:
        text = identifier.strip()
        if not text:
            raise RecipientNotFoundError("recipient must be non-empty")

        if text.startswith("npub"):
            try:
                pubkey = decode_npub(text)
            except WalletCryptoError as exc:
                raise RecipientNotFoundError(f"Invalid npub {text!r}: {exc}") from exc
        elif _HEX_PUBKEY.match(text):
            pubkey = text.lower()
        else:
            pubkey = await resolve_nip05(self._transport, text)

        return Recipient(identifier=text, pubkey=pubkey, npub=encode_npub(pubkey))
