"""
In-memory transaction store.

Holds the serialized transactions submitted to the harness, keyed by the
caller's identifier, for the lifetime of the process.
"""

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

from .codec.prefix import sequence_number_from_hex
from .runtime.errors import TransactionNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredTransaction:
    """Snapshot of a stored transaction record."""
    transaction_id: str
    raw_bytes_hex: str
    sequence_number: Optional[int]
    stored_at: int
    secondary_signature_hex: Optional[str] = None

    @property
    def has_signature(self) -> bool:
        return self.secondary_signature_hex is not None

    def elapsed_seconds(self, now: float) -> int:
        """Whole seconds since the record was stored, never negative."""
        return max(0, int(now) - self.stored_at)


class TransactionStore:
    """
    Thread-safe keyed store of transaction records.

    Records are frozen dataclasses, so the snapshots handed out can never
    alias mutable store state. Re-storing an identifier replaces the whole
    record, including any signature attached to the previous one.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """
        Initialize an empty store.

        Args:
            clock: Source of Unix time in seconds
        """
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Dict[str, StoredTransaction] = {}

    def now(self) -> float:
        return self._clock()

    def store(self, transaction_id: str, raw_bytes_hex: str) -> StoredTransaction:
        """
        Insert or overwrite a transaction.

        Malformed hex is stored as given; only the sequence number is then
        absent.

        Args:
            transaction_id: Caller-chosen identifier
            raw_bytes_hex: Hex-encoded transaction bytes, stored verbatim

        Returns:
            The stored record
        """
        sequence_number = sequence_number_from_hex(raw_bytes_hex)
        record = StoredTransaction(
            transaction_id=transaction_id,
            raw_bytes_hex=raw_bytes_hex,
            sequence_number=sequence_number,
            stored_at=int(self._clock()),
        )

        with self._lock:
            replaced = self._records.get(transaction_id)
            self._records[transaction_id] = record

        if replaced is not None:
            logger.info(
                f"Overwrote transaction {transaction_id}"
                f" (previous signature {'dropped' if replaced.has_signature else 'absent'})"
            )
        logger.info(
            f"Stored transaction {transaction_id}: {len(raw_bytes_hex)} hex chars,"
            f" sequence_number={sequence_number}"
        )
        return record

    def attach_signature(self, transaction_id: str, signature_hex: str) -> StoredTransaction:
        """
        Set the secondary signer's signature, replacing any earlier one.

        Args:
            transaction_id: Identifier of an existing record
            signature_hex: Hex-encoded signature bytes

        Returns:
            The updated record

        Raises:
            TransactionNotFoundError: If nothing is stored under transaction_id
        """
        with self._lock:
            current = self._records.get(transaction_id)
            if current is None:
                raise TransactionNotFoundError(transaction_id)
            updated = replace(current, secondary_signature_hex=signature_hex)
            self._records[transaction_id] = updated

        logger.info(f"Stored signature for {transaction_id}: {len(signature_hex)} hex chars")
        return updated

    def get(self, transaction_id: str) -> StoredTransaction:
        """
        Fetch a record snapshot.

        Raises:
            TransactionNotFoundError: If nothing is stored under transaction_id
        """
        with self._lock:
            record = self._records.get(transaction_id)
        if record is None:
            raise TransactionNotFoundError(transaction_id)
        return record

    def __contains__(self, transaction_id: object) -> bool:
        with self._lock:
            return transaction_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
