"""Runtime helpers for the BCS round-trip harness"""

from .errors import (
    ErrorCode,
    HarnessError,
    DecodeError,
    CodecError,
    TransactionNotFoundError,
    ClientError,
)

__all__ = [
    "ErrorCode",
    "HarnessError",
    "DecodeError",
    "CodecError",
    "TransactionNotFoundError",
    "ClientError",
]
