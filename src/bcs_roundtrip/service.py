"""
Transaction service.

The four logical operations of the harness, independent of transport:
store a transaction, store a signature, get a transaction, report
diagnostics. Only an unknown identifier is reported as a failure.
"""

import logging
from typing import Optional

from .monitoring.metrics import MetricsRegistry
from .retrieval import RetrievalPolicy
from .runtime.errors import TransactionNotFoundError
from .schemas import (
    DiagnosticsResponse,
    GetTransactionResponse,
    StoreSignatureRequest,
    StoreSignatureResponse,
    StoreTransactionRequest,
    StoreTransactionResponse,
)
from .store import TransactionStore

logger = logging.getLogger(__name__)


class TransactionService:
    """Glue between the request layer, the store and the retrieval policy."""

    def __init__(self, store: TransactionStore, policy: RetrievalPolicy,
                 metrics: Optional[MetricsRegistry] = None):
        self.store = store
        self.policy = policy
        self.metrics = metrics if metrics is not None else MetricsRegistry()
        self._stores = self.metrics.counter("stores", "Transactions stored")
        self._signatures = self.metrics.counter("signatures", "Signature attach attempts by outcome")

    def store_transaction(self, request: StoreTransactionRequest) -> StoreTransactionResponse:
        """Store a transaction; never fails, malformed hex just has no sequence number."""
        logger.info(f"Storing transaction: {request.transaction_id}")
        record = self.store.store(request.transaction_id, request.bcs_hex)
        self._stores.increment(labels={"sequence_number": "parsed" if record.sequence_number is not None else "absent"})
        return StoreTransactionResponse(
            success=True,
            transaction_id=record.transaction_id,
            sequence_number=record.sequence_number,
            message="Transaction stored",
        )

    def store_signature(self, request: StoreSignatureRequest) -> StoreSignatureResponse:
        """
        Attach a secondary signer's signature.

        Raises:
            TransactionNotFoundError: If the transaction was never stored
        """
        logger.info(f"Storing signature for: {request.transaction_id}")
        try:
            self.store.attach_signature(request.transaction_id, request.signature_hex)
        except TransactionNotFoundError:
            logger.warning(f"Signature rejected, transaction not found: {request.transaction_id}")
            self._signatures.increment(labels={"outcome": "not_found"})
            raise
        self._signatures.increment(labels={"outcome": "stored"})
        return StoreSignatureResponse(
            success=True,
            transaction_id=request.transaction_id,
            message="Signature stored",
        )

    def get_transaction(self, transaction_id: str) -> GetTransactionResponse:
        """
        Retrieve a transaction, processed by the retrieval policy.

        Raises:
            TransactionNotFoundError: If the transaction was never stored
        """
        logger.info(f"Retrieving transaction: {transaction_id} (mode: {self.policy.mode.value})")
        try:
            record = self.store.get(transaction_id)
        except TransactionNotFoundError:
            logger.warning(f"Transaction not found: {transaction_id}")
            raise

        elapsed = record.elapsed_seconds(self.store.now())
        logger.info(
            f"Found {transaction_id}: stored {elapsed} seconds ago,"
            f" sequence_number={record.sequence_number},"
            f" has secondary signature: {record.has_signature}"
        )

        retrieval = self.policy.retrieve(record)
        return GetTransactionResponse(
            success=True,
            bcs_hex=retrieval.hex,
            secondary_signature_hex=record.secondary_signature_hex,
            sequence_number=record.sequence_number,
            stored_at=record.stored_at,
            message=f"Transaction retrieved (stored {elapsed} seconds ago)",
        )

    def diagnostics(self, limit: Optional[int] = None) -> DiagnosticsResponse:
        """Recent retrieval observations and counters."""
        return DiagnosticsResponse(
            mode=self.policy.mode.value,
            codec=self.policy.codec.name,
            stored_transactions=len(self.store),
            observations=[o.to_dict() for o in self.policy.recorder.recent(limit)],
            metrics=self.metrics.collect_all(),
        )
