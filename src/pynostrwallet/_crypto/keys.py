"""Nostr key material (NIP-19 ``nsec``/``npub``) on secp256k1.

Nostr public keys are the 32-byte x coordinate of the secp256k1 point
(BIP-340 x-only keys).
"""

from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric import ec

from pynostrwallet._crypto.bech32 import bech32_decode, bech32_encode
from pynostrwallet.exceptions import WalletCryptoError

NSEC_HRP = "nsec"
NPUB_HRP = "npub"
_KEY_BYTES = 32


def _decode_key(value: str, hrp: str) -> bytes:
    decoded_hrp, payload = bech32_decode(value)
    if decoded_hrp != hrp:
        raise WalletCryptoError(f"expected {hrp} prefix, got {decoded_hrp}")
    if len(payload) != _KEY_BYTES:
        raise WalletCryptoError(f"{hrp} payload must be {_KEY_BYTES} bytes (got {len(payload)})")
    return payload


def generate_secret_key() -> bytes:
    """Return a fresh 32-byte secp256k1 secret key."""
    private_key = ec.generate_private_key(ec.SECP256K1())
    return private_key.private_numbers().private_value.to_bytes(_KEY_BYTES, "big")


def public_key_hex(secret_key: bytes) -> str:
    """Derive the x-only public key (lowercase hex) for *secret_key*."""
    try:
        private_key = ec.derive_private_key(int.from_bytes(secret_key, "big"), ec.SECP256K1())
    except ValueError as exc:
        raise WalletCryptoError("secret key is outside the secp256k1 range") from exc
    x = private_key.public_key().public_numbers().x
    return x.to_bytes(_KEY_BYTES, "big").hex()


def encode_nsec(secret_key: bytes) -> str:
    return bech32_encode(NSEC_HRP, secret_key)


def decode_nsec(nsec: str) -> bytes:
    return _decode_key(nsec, NSEC_HRP)


def encode_npub(pubkey_hex: str) -> str:
    try:
        payload = bytes.fromhex(pubkey_hex)
    except ValueError as exc:
        raise WalletCryptoError("public key must be hex-encoded") from exc
    if len(payload) != _KEY_BYTES:
        raise WalletCryptoError(f"public key must be {_KEY_BYTES} bytes (got {len(payload)})")
    return bech32_encode(NPUB_HRP, payload)


def decode_npub(npub: str) -> str:
    """Return the lowercase hex public key carried by *npub*."""
    return _decode_key(npub, NPUB_HRP).hex()


def generate_nsec() -> str:
    """Generate a new identity and return it as an ``nsec`` string."""
    return encode_nsec(generate_secret_key())


def npub_from_nsec(nsec: str) -> str:
    """Decode *nsec* and return the matching ``npub``.

    Raises
    ------
    WalletCryptoError
        If *nsec* is not a valid NIP-19 secret key.
    """
    return encode_npub(public_key_hex(decode_nsec(nsec)))
