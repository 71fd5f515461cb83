"""
Fixed-offset sequence number reader.

A multi-agent transaction starts with its raw transaction, which in turn
starts with ``[sender: 32 bytes][sequence_number: u64 little-endian]``.
Reading those 40 bytes needs no schema, so the sequence number can be
recorded even for payloads the full codec rejects. The value is for
observability only and must never decide whether a transaction is valid.
"""

import struct
from typing import Optional

from .hexcodec import decode_hex
from ..runtime.errors import DecodeError

ADDRESS_LENGTH = 32
SEQUENCE_NUMBER_OFFSET = ADDRESS_LENGTH
SEQUENCE_NUMBER_LENGTH = 8
MIN_PREFIX_LENGTH = SEQUENCE_NUMBER_OFFSET + SEQUENCE_NUMBER_LENGTH

_U64LE = struct.Struct("<Q")


def read_sequence_number(buf: bytes) -> Optional[int]:
    """
    Read the sequence number at byte offset 32.

    Args:
        buf: Decoded transaction bytes

    Returns:
        The unsigned 64-bit sequence number, or None if ``buf`` is shorter
        than 40 bytes
    """
    if len(buf) < MIN_PREFIX_LENGTH:
        return None
    return _U64LE.unpack_from(buf, SEQUENCE_NUMBER_OFFSET)[0]


def sequence_number_from_hex(text: str) -> Optional[int]:
    """Best-effort variant of read_sequence_number for hex text; malformed hex gives None."""
    try:
        return read_sequence_number(decode_hex(text))
    except DecodeError:
        return None
