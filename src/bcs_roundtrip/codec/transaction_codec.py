"""
Transaction Codec Adapter

Wraps the ``aptos-sdk`` BCS codec for multi-agent transactions behind a
two-method interface so that any conforming implementation can be plugged
into the retrieval policy. The "is the round-trip lossy" question is asked
of whichever codec is supplied.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple, runtime_checkable

from aptos_sdk.account_address import AccountAddress
from aptos_sdk.bcs import Deserializer, Serializer
from aptos_sdk.transactions import (
    EntryFunction,
    MultiAgentRawTransaction,
    RawTransaction,
    Script,
)

from ..runtime.errors import CodecError, ErrorCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MultiAgentRecord:
    """A decoded multi-agent transaction plus the optional fee-payer slot."""

    raw_transaction: RawTransaction
    secondary_signers: Tuple[AccountAddress, ...] = ()
    fee_payer: Optional[AccountAddress] = None

    @property
    def sequence_number(self) -> int:
        return self.raw_transaction.sequence_number

    def summary(self) -> Dict[str, Any]:
        raw = self.raw_transaction
        return {
            "sender": str(raw.sender),
            "sequence_number": raw.sequence_number,
            "payload": _describe_payload(raw.payload.value),
            "max_gas_amount": raw.max_gas_amount,
            "gas_unit_price": raw.gas_unit_price,
            "expiration_timestamp_secs": raw.expiration_timestamps_secs,
            "chain_id": raw.chain_id,
            "secondary_signers": [str(signer) for signer in self.secondary_signers],
            "fee_payer": str(self.fee_payer) if self.fee_payer is not None else None,
        }


def _describe_payload(value: Any) -> str:
    if isinstance(value, Script):
        return f"script ({len(value.code)} bytes of bytecode, {len(value.args)} args)"
    if isinstance(value, EntryFunction):
        return f"entry function {value.module}::{value.function}"
    return type(value).__name__


@runtime_checkable
class TransactionCodec(Protocol):
    """Decode bytes into a multi-agent record and encode it back."""

    name: str

    def decode(self, data: bytes) -> MultiAgentRecord:
        """Decode ``data``; raise CodecError if it does not match the schema."""
        ...

    def encode(self, record: MultiAgentRecord) -> bytes:
        """Encode a record previously produced by decode."""
        ...


class BcsMultiAgentCodec:
    """
    Multi-agent transaction codec backed by ``aptos_sdk.bcs``.

    Two layouts exist in the wild. The TypeScript SDK serializes a
    multi-agent transaction as raw transaction, secondary signers and then an
    ``Option<address>`` fee-payer slot. The Rust SDK struct has no fee-payer
    slot, so bytes from the TypeScript SDK leave one unread byte behind and
    are rejected. ``include_fee_payer`` picks the layout.
    """

    def __init__(self, include_fee_payer: bool = True):
        self.include_fee_payer = include_fee_payer
        self.name = "bcs-multi-agent" + ("" if include_fee_payer else "-no-fee-payer")

    def decode(self, data: bytes) -> MultiAgentRecord:
        """
        Decode a multi-agent transaction.

        Args:
            data: BCS bytes

        Returns:
            Structured record

        Raises:
            CodecError: If the bytes do not match the layout or are not fully consumed
        """
        deserializer = Deserializer(data)
        try:
            transaction = MultiAgentRawTransaction.deserialize_inner(deserializer)
            fee_payer = None
            if self.include_fee_payer and deserializer.bool():
                fee_payer = AccountAddress.deserialize(deserializer)
        # aptos_sdk reports malformed input with plain Exception
        except Exception as e:
            raise CodecError(
                f"BCS deserialize error: {str(e) or type(e).__name__}",
                offset=len(data) - deserializer.remaining(),
                cause=e,
            ) from e

        remaining = deserializer.remaining()
        if remaining:
            raise CodecError(
                f"Unexpected trailing bytes: {remaining} remaining after decode",
                offset=len(data) - remaining,
            )
        return MultiAgentRecord(
            transaction.raw_transaction,
            tuple(transaction.secondary_signers),
            fee_payer,
        )

    def encode(self, record: MultiAgentRecord) -> bytes:
        """
        Encode a multi-agent transaction.

        Args:
            record: Structured record

        Returns:
            BCS bytes
        """
        if not self.include_fee_payer and record.fee_payer is not None:
            raise CodecError("Layout has no fee payer slot", code=ErrorCode.MARSHAL_ERROR)

        serializer = Serializer()
        try:
            # MultiAgentRawTransaction.serialize prepends a signing-message variant tag
            record.raw_transaction.serialize(serializer)
            serializer.sequence(list(record.secondary_signers), Serializer.struct)
            if self.include_fee_payer:
                serializer.bool(record.fee_payer is not None)
                if record.fee_payer is not None:
                    record.fee_payer.serialize(serializer)
        except Exception as e:
            raise CodecError(
                f"BCS serialize error: {str(e) or type(e).__name__}",
                code=ErrorCode.MARSHAL_ERROR,
                cause=e,
            ) from e
        return serializer.output()

    def __repr__(self) -> str:
        return f"BcsMultiAgentCodec(include_fee_payer={self.include_fee_payer})"


def reserialize(codec: TransactionCodec, data: bytes) -> bytes:
    """
    Decode ``data`` and immediately re-encode the result.

    Args:
        codec: Codec to round-trip through
        data: Original bytes

    Returns:
        Re-encoded bytes

    Raises:
        CodecError: If either step fails
    """
    record = codec.decode(data)
    logger.debug(f"Decoded with {codec.name}: {record.summary()}")
    return codec.encode(record)
