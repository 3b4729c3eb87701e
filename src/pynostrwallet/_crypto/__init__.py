"""Key material helpers for Nostr identities."""

from __future__ import annotations

from typing import Protocol

from pynostrwallet._crypto.keys import (
    decode_npub,
    decode_nsec,
    encode_npub,
    encode_nsec,
    generate_nsec,
    npub_from_nsec,
    public_key_hex,
)


class IdentityCodec(Protocol):
    """Protocol for resolving and generating wallet identities."""

    def decode(self, nsec: str) -> str: ...

    def generate(self) -> str: ...


class NostrIdentityCodec:
    """Default :class:`IdentityCodec` backed by secp256k1 NIP-19 keys."""

    def decode(self, nsec: str) -> str:
        return npub_from_nsec(nsec)

    def generate(self) -> str:
        return generate_nsec()


__all__ = [
    "IdentityCodec",
    "NostrIdentityCodec",
    "decode_npub",
    "decode_nsec",
    "encode_npub",
    "encode_nsec",
    "generate_nsec",
    "npub_from_nsec",
    "public_key_hex",
]
