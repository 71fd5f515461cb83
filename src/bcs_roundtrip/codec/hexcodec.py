"""
Hex Codec

Converts between hexadecimal text (optionally ``0x``-prefixed) and raw bytes.
Decoding is strict: unlike ``bytes.fromhex`` no whitespace is tolerated.
"""

import binascii
import string

from ..runtime.errors import DecodeError

_HEX_DIGITS = frozenset(string.hexdigits)


def has_hex_prefix(text: str) -> bool:
    """Return True if ``text`` starts with a ``0x`` or ``0X`` marker."""
    return text[:2] in ("0x", "0X")


def strip_hex_prefix(text: str) -> str:
    """Remove a single leading ``0x``/``0X`` marker if present."""
    return text[2:] if has_hex_prefix(text) else text


def decode_hex(text: str) -> bytes:
    """
    Decode hexadecimal text into bytes.

    Args:
        text: Hex digits, upper or lower case, optionally ``0x``-prefixed

    Returns:
        Decoded bytes

    Raises:
        DecodeError: On an odd number of digits or any non-hex character
    """
    digits = strip_hex_prefix(text)

    if len(digits) % 2 != 0:
        raise DecodeError(
            f"Odd number of hex digits: {len(digits)}",
            details={"length": len(digits)},
        )

    for index, char in enumerate(digits):
        if char not in _HEX_DIGITS:
            raise DecodeError(
                f"Invalid hex character {char!r} at position {index}",
                details={"position": index},
            )

    try:
        return binascii.unhexlify(digits)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("Invalid hex", cause=e) from e


def encode_hex(data: bytes, with_prefix: bool = False) -> str:
    """
    Encode bytes as lowercase hex.

    Args:
        data: Bytes to encode
        with_prefix: Prepend ``0x`` when True

    Returns:
        Lowercase hex text
    """
    digits = data.hex()
    return f"0x{digits}" if with_prefix else digits
