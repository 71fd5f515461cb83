"""
Harness Error Model

This module provides the error handling framework for the round-trip harness.
Every failure the core can produce maps to one of a small set of codes so the
request layer can tell "nothing stored under this key" apart from codec
problems, which are only ever reported as diagnostics.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Harness error codes."""

    # Success
    OK = 0

    # General errors (1-99)
    UNKNOWN = 1
    INTERNAL = 2
    NOT_FOUND = 4

    # Encoding errors (100-199)
    ENCODING_ERROR = 100
    INVALID_HEX = 101
    INVALID_BINARY = 102
    MARSHAL_ERROR = 103
    UNMARSHAL_ERROR = 104

    # Network errors (200-299)
    NETWORK_ERROR = 200
    INVALID_RESPONSE = 205


class HarnessError(Exception):
    """
    Base class for all harness errors.

    Provides structured error information: a code, a message, optional
    details and the underlying cause.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize a harness error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class DecodeError(HarnessError):
    """Malformed hexadecimal text: odd digit count or a non-hex character."""

    def __init__(self, message: str = "Invalid hex",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_HEX, details, cause)


class CodecError(HarnessError):
    """Structured BCS decode or encode failure."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNMARSHAL_ERROR,
                 offset: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        details = dict(details or {})
        if offset is not None:
            details["offset"] = offset
        super().__init__(message, code, details, cause)
        self.offset = offset


class TransactionNotFoundError(HarnessError):
    """No record is stored under the requested identifier."""

    def __init__(self, transaction_id: str,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__("Transaction not found", ErrorCode.NOT_FOUND, details, cause)
        self.transaction_id = transaction_id


class ClientError(HarnessError):
    """Transport failure or unusable response while talking to a harness server."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.NETWORK_ERROR,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


__all__ = [
    "ErrorCode",
    "HarnessError",
    "DecodeError",
    "CodecError",
    "TransactionNotFoundError",
    "ClientError",
]
