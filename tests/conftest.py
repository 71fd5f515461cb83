"""
Shared fixtures: sample multi-agent transactions built from aptos-sdk
types, encoded in both wire layouts.
"""

import dataclasses

import pytest
from aptos_sdk.account_address import AccountAddress
from aptos_sdk.transactions import (
    EntryFunction,
    ModuleId,
    RawTransaction,
    Script,
    ScriptArgument,
    TransactionPayload,
)
from aptos_sdk.type_tag import StructTag, TypeTag

from bcs_roundtrip.codec.transaction_codec import BcsMultiAgentCodec, MultiAgentRecord

SENDER = AccountAddress(bytes([0x11]) * 32)
SECONDARY = AccountAddress(bytes([0x22]) * 32)
FEE_PAYER = AccountAddress(bytes([0x33]) * 32)
FRAMEWORK = AccountAddress(bytes(31) + b"\x01")


class FakeClock:
    """Settable clock for store and policy timestamps."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def script_payload() -> TransactionPayload:
    return TransactionPayload(Script(
        bytes.fromhex("a11ceb0b0600000006"),
        [],
        [
            ScriptArgument(ScriptArgument.U64, 1000),
            ScriptArgument(ScriptArgument.ADDRESS, SECONDARY),
            ScriptArgument(ScriptArgument.BOOL, True),
        ],
    ))


def entry_function_payload() -> TransactionPayload:
    coin = TypeTag(StructTag(FRAMEWORK, "aptos_coin", "AptosCoin", []))
    return TransactionPayload(EntryFunction(
        ModuleId(FRAMEWORK, "coin"),
        "transfer",
        [coin],
        [SECONDARY.address, (500).to_bytes(8, "little")],
    ))


def make_transaction(sequence_number: int = 7, payload=None, fee_payer=None,
                     secondary_signers=(SECONDARY,)) -> MultiAgentRecord:
    raw = RawTransaction(
        SENDER,
        sequence_number,
        payload if payload is not None else script_payload(),
        200_000,
        100,
        1_700_000_600,
        4,
    )
    return MultiAgentRecord(raw, tuple(secondary_signers), fee_payer)


def encode(txn: MultiAgentRecord, include_fee_payer: bool = True) -> bytes:
    return BcsMultiAgentCodec(include_fee_payer=include_fee_payer).encode(txn)


class SequenceBumpingCodec:
    """Codec that decodes faithfully but re-encodes a different sequence number."""

    name = "sequence-bumping"

    def __init__(self, delta: int = 1):
        self._inner = BcsMultiAgentCodec()
        self.delta = delta

    def decode(self, data):
        return self._inner.decode(data)

    def encode(self, record):
        raw = record.raw_transaction
        bumped = RawTransaction(
            raw.sender,
            raw.sequence_number + self.delta,
            raw.payload,
            raw.max_gas_amount,
            raw.gas_unit_price,
            raw.expiration_timestamps_secs,
            raw.chain_id,
        )
        return self._inner.encode(dataclasses.replace(record, raw_transaction=bumped))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transaction():
    return make_transaction()


@pytest.fixture
def ts_layout_bytes(transaction):
    """Transaction bytes as the TypeScript SDK produces them, with a fee payer slot."""
    return encode(transaction, include_fee_payer=True)


@pytest.fixture
def rust_layout_bytes(transaction):
    """Transaction bytes without the fee payer slot."""
    return encode(transaction, include_fee_payer=False)


@pytest.fixture
def ts_layout_hex(ts_layout_bytes):
    return ts_layout_bytes.hex()


@pytest.fixture
def make_txn():
    """Factory for multi-agent transactions; see make_transaction."""
    return make_transaction


@pytest.fixture
def encode_txn():
    return encode


@pytest.fixture
def payloads():
    return {
        "script": script_payload(),
        "entry_function": entry_function_payload(),
    }


@pytest.fixture
def fee_payer_address():
    return FEE_PAYER


@pytest.fixture
def bumping_codec():
    return SequenceBumpingCodec()
