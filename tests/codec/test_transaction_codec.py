"""Tests for the multi-agent transaction codec and its two wire layouts"""

import pytest

from bcs_roundtrip.codec.transaction_codec import BcsMultiAgentCodec, TransactionCodec, reserialize
from bcs_roundtrip.runtime.errors import CodecError, ErrorCode

PAYLOAD_TAG_OFFSET = 40
# sender, sequence number, payload tag, code length + 9 bytes of code, ty_args length, args length
FIRST_SCRIPT_ARG_OFFSET = 53


@pytest.fixture
def ts_codec():
    return BcsMultiAgentCodec(include_fee_payer=True)


@pytest.fixture
def rust_codec():
    return BcsMultiAgentCodec(include_fee_payer=False)


class TestRoundTrip:

    @pytest.mark.parametrize("payload_name", ["script", "entry_function"])
    @pytest.mark.parametrize("include_fee_payer", [True, False])
    def test_decode_then_encode_is_identity(self, payloads, make_txn, payload_name, include_fee_payer):
        codec = BcsMultiAgentCodec(include_fee_payer=include_fee_payer)
        txn = make_txn(payload=payloads[payload_name])
        data = codec.encode(txn)

        decoded = codec.decode(data)
        assert decoded == txn
        assert codec.encode(decoded) == data

    def test_fee_payer_present(self, ts_codec, make_txn, fee_payer_address):
        txn = make_txn(fee_payer=fee_payer_address)
        data = ts_codec.encode(txn)
        assert data[-33] == 1
        assert data[-32:] == fee_payer_address.address
        assert ts_codec.decode(data).fee_payer == fee_payer_address

    def test_no_secondary_signers(self, ts_codec, make_txn):
        txn = make_txn(secondary_signers=())
        assert ts_codec.decode(ts_codec.encode(txn)).secondary_signers == ()

    def test_sequence_number_matches_prefix(self, ts_codec, ts_layout_bytes):
        assert ts_codec.decode(ts_layout_bytes).sequence_number == 7
        assert ts_layout_bytes[32:40] == (7).to_bytes(8, "little")

    def test_reserialize_helper(self, ts_codec, ts_layout_bytes):
        assert reserialize(ts_codec, ts_layout_bytes) == ts_layout_bytes

    def test_non_canonical_variant_tag_is_normalised(self, ts_codec, ts_layout_bytes):
        # script tag 0x00 spelled as the two-byte 0x80 0x00
        data = ts_layout_bytes[:PAYLOAD_TAG_OFFSET] + b"\x80" + ts_layout_bytes[PAYLOAD_TAG_OFFSET:]
        reencoded = ts_codec.encode(ts_codec.decode(data))
        assert reencoded != data
        assert reencoded == ts_layout_bytes


class TestLayouts:

    def test_fee_payer_slot_is_one_trailing_byte(self, ts_layout_bytes, rust_layout_bytes):
        assert len(ts_layout_bytes) == len(rust_layout_bytes) + 1
        assert ts_layout_bytes[:-1] == rust_layout_bytes
        assert ts_layout_bytes[-1] == 0

    def test_rust_layout_rejects_fee_payer_slot(self, rust_codec, ts_layout_bytes):
        with pytest.raises(CodecError, match="trailing bytes") as exc_info:
            rust_codec.decode(ts_layout_bytes)
        assert exc_info.value.offset == len(ts_layout_bytes) - 1
        assert exc_info.value.code == ErrorCode.UNMARSHAL_ERROR

    def test_fee_payer_layout_needs_the_slot(self, ts_codec, rust_layout_bytes):
        with pytest.raises(CodecError, match="Unexpected end of input") as exc_info:
            ts_codec.decode(rust_layout_bytes)
        assert exc_info.value.cause is not None

    def test_rust_layout_cannot_encode_fee_payer(self, rust_codec, make_txn, fee_payer_address):
        with pytest.raises(CodecError, match="no fee payer slot") as exc_info:
            rust_codec.encode(make_txn(fee_payer=fee_payer_address))
        assert exc_info.value.code == ErrorCode.MARSHAL_ERROR

    def test_names(self, ts_codec, rust_codec):
        assert ts_codec.name == "bcs-multi-agent"
        assert rust_codec.name == "bcs-multi-agent-no-fee-payer"
        assert "include_fee_payer=False" in repr(rust_codec)

    def test_satisfies_protocol(self, ts_codec):
        assert isinstance(ts_codec, TransactionCodec)


class TestMalformedInput:

    @pytest.mark.parametrize("length", [0, 10, 39, 40, 41, 60])
    def test_truncated(self, ts_codec, ts_layout_bytes, length):
        with pytest.raises(CodecError):
            ts_codec.decode(ts_layout_bytes[:length])

    def test_one_byte_short(self, ts_codec, ts_layout_bytes):
        with pytest.raises(CodecError):
            ts_codec.decode(ts_layout_bytes[:-1])

    def test_extra_trailing_byte(self, ts_codec, ts_layout_bytes):
        with pytest.raises(CodecError, match="1 remaining"):
            ts_codec.decode(ts_layout_bytes + b"\x00")

    @pytest.mark.parametrize("variant", [3, 7])
    def test_unsupported_payload_variant(self, ts_codec, ts_layout_bytes, variant):
        data = bytearray(ts_layout_bytes)
        data[PAYLOAD_TAG_OFFSET] = variant
        with pytest.raises(CodecError, match="Invalid type") as exc_info:
            ts_codec.decode(bytes(data))
        assert exc_info.value.offset == PAYLOAD_TAG_OFFSET + 1

    def test_module_bundle_rejected(self, ts_codec, ts_layout_bytes):
        data = bytearray(ts_layout_bytes)
        data[PAYLOAD_TAG_OFFSET] = 1
        with pytest.raises(CodecError, match="NotImplementedError") as exc_info:
            ts_codec.decode(bytes(data))
        assert isinstance(exc_info.value.cause, NotImplementedError)

    def test_unsupported_script_argument(self, ts_codec, ts_layout_bytes):
        data = bytearray(ts_layout_bytes)
        # u64 argument relabelled as u16
        data[FIRST_SCRIPT_ARG_OFFSET] = 6
        with pytest.raises(CodecError, match="Invalid variant"):
            ts_codec.decode(bytes(data))

    def test_invalid_fee_payer_option_tag(self, ts_codec, ts_layout_bytes):
        data = ts_layout_bytes[:-1] + b"\x02"
        with pytest.raises(CodecError, match="Unexpected boolean value"):
            ts_codec.decode(data)


class TestRecords:

    def test_summary(self, ts_codec, ts_layout_bytes):
        summary = ts_codec.decode(ts_layout_bytes).summary()
        assert summary["sender"] == "0x" + "11" * 32
        assert summary["sequence_number"] == 7
        assert summary["payload"] == "script (9 bytes of bytecode, 3 args)"
        assert summary["expiration_timestamp_secs"] == 1_700_000_600
        assert summary["chain_id"] == 4
        assert summary["secondary_signers"] == ["0x" + "22" * 32]
        assert summary["fee_payer"] is None

    def test_entry_function_description(self, ts_codec, payloads, make_txn, fee_payer_address):
        data = ts_codec.encode(make_txn(payload=payloads["entry_function"], fee_payer=fee_payer_address))
        summary = ts_codec.decode(data).summary()
        assert summary["payload"] == "entry function 0x1::coin::transfer"
        assert summary["fee_payer"] == "0x" + "33" * 32
