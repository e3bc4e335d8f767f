"""Base58Check helpers and TRON address conversion."""

from __future__ import annotations

import binascii
import hashlib

__all__ = [
    "AddressError",
    "b58encode",
    "b58decode",
    "tron_to_hex_address",
    "hex_to_tron_address",
    "decode_base58_address",
]

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {ch: i for i, ch in enumerate(_ALPHABET)}

TRON_PREFIX = b"\x41"
_ADDRESS_LENGTH = 25
_BODY_LENGTH = 21


class AddressError(ValueError):
    """Raised when an address cannot be decoded or converted."""


def _checksum(body: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(body).digest()).digest()[:4]


def b58encode(data: bytes) -> str:
    """Encode bytes with the Bitcoin base58 alphabet."""
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, remainder = divmod(number, 58)
        digits.append(_ALPHABET[remainder])
    leading_zeros = len(data) - len(data.lstrip(b"\0"))
    return "1" * leading_zeros + "".join(reversed(digits))


def b58decode(text: str) -> bytes:
    """Decode a base58 string; raise AddressError on a character outside the alphabet."""
    number = 0
    for ch in text:
        try:
            number = number * 58 + _INDEX[ch]
        except KeyError:
            raise AddressError(f"invalid base58 character {ch!r}") from None
    leading_ones = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big")
    return b"\0" * leading_ones + body


def tron_to_hex_address(tron_addr: str) -> str:
    """Convert a base58 TRON address to its 0x-prefixed hex form (with the 0x41 byte)."""
    if not tron_addr:
        raise AddressError("address is empty")
    if not tron_addr.startswith("T"):
        raise AddressError("invalid TRON address prefix")

    try:
        decoded = b58decode(tron_addr)
    except AddressError:
        decoded = b""
    if len(decoded) != _ADDRESS_LENGTH:
        raise AddressError("invalid address length after base58 decoding")

    body, checksum = decoded[:_BODY_LENGTH], decoded[_BODY_LENGTH:]
    if checksum != _checksum(body):
        raise AddressError("invalid checksum")
    if body[:1] != TRON_PREFIX:
        raise AddressError("invalid TRON address prefix byte")

    return "0x" + body.hex()


def hex_to_tron_address(hex_addr: str) -> str:
    """Convert a hex address (without the 0x41 byte) to a base58 TRON address."""
    digits = hex_addr[2:] if hex_addr.startswith("0x") else hex_addr
    try:
        raw = binascii.unhexlify(digits)
    except (binascii.Error, ValueError) as exc:
        raise AddressError(f"invalid hex address: {exc}") from exc
    full = TRON_PREFIX + raw
    return b58encode(full + _checksum(full))


def decode_base58_address(address: str) -> str:
    """Decode a base58 string and return its bytes as hex, without checks."""
    if not address:
        raise AddressError("address is empty")
    try:
        raw = b58decode(address)
    except AddressError:
        raw = b""
    if not raw:
        raise AddressError("failed to decode address")
    return raw.hex()