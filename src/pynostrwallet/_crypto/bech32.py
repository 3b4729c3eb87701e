"""Bech32 (BIP-173) encoding as used by NIP-19 ``nsec``/``npub`` strings."""

from __future__ import annotations

from pynostrwallet.exceptions import WalletCryptoError

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_CHARSET_MAP = {ch: idx for idx, ch in enumerate(_CHARSET)}
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


def _polymod(values: list[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i in range(5):
            if (top >> i) & 1:
                chk ^= _GENERATOR[i]
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(ch) >> 5 for ch in hrp] + [0] + [ord(ch) & 31 for ch in hrp]


def _create_checksum(hrp: str, data: list[int]) -> list[int]:
    polymod = _polymod(_hrp_expand(hrp) + data + [0] * 6) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def _convert_bits(data: bytes | list[int], from_bits: int, to_bits: int, *, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    out: list[int] = []
    maxv = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise WalletCryptoError("invalid value for bit conversion")
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
        raise WalletCryptoError("invalid padding in bech32 data")
    return out


def bech32_encode(hrp: str, payload: bytes) -> str:
    """Encode *payload* bytes under the human-readable part *hrp*."""
    data = _convert_bits(payload, 8, 5, pad=True)
    combined = data + _create_checksum(hrp, data)
    return hrp + "1" + "".join(_CHARSET[d] for d in combined)


def bech32_decode(value: str) -> tuple[str, bytes]:
    """Decode a bech32 string into ``(hrp, payload)``.

    Raises
    ------
    WalletCryptoError
        If the string is malformed or the checksum does not match.
    """
    text = value.strip()
    if text.lower() != text and text.upper() != text:
        raise WalletCryptoError("bech32 string mixes upper and lower case")
    text = text.lower()
    pos = text.rfind("1")
    if pos < 1 or pos + 7 > len(text):
        raise WalletCryptoError("bech32 separator missing or misplaced")
    hrp = text[:pos]
    try:
        data = [_CHARSET_MAP[ch] for ch in text[pos + 1 :]]
    except KeyError as exc:
        raise WalletCryptoError(f"invalid bech32 character {exc.args[0]!r}") from exc
    if _polymod(_hrp_expand(hrp) + data) != 1:
        raise WalletCryptoError("bech32 checksum mismatch")
    return hrp, bytes(_convert_bits(data[:-6], 5, 8, pad=False))
