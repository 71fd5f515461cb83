"""Tests for hex text <-> bytes conversion"""

import pytest

from bcs_roundtrip.codec.hexcodec import decode_hex, encode_hex, has_hex_prefix, strip_hex_prefix
from bcs_roundtrip.runtime.errors import DecodeError, ErrorCode


class TestDecodeHex:

    @pytest.mark.parametrize("text,expected", [
        ("", b""),
        ("0x", b""),
        ("00", b"\x00"),
        ("deadbeef", b"\xde\xad\xbe\xef"),
        ("DEADBEEF", b"\xde\xad\xbe\xef"),
        ("DeAdBeEf", b"\xde\xad\xbe\xef"),
        ("0xdeadbeef", b"\xde\xad\xbe\xef"),
        ("0Xdeadbeef", b"\xde\xad\xbe\xef"),
    ])
    def test_valid(self, text, expected):
        assert decode_hex(text) == expected

    def test_odd_length_rejected(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_hex("abc")
        assert exc_info.value.code == ErrorCode.INVALID_HEX
        assert exc_info.value.details["length"] == 3

    def test_odd_length_after_prefix_rejected(self):
        with pytest.raises(DecodeError):
            decode_hex("0x123")

    @pytest.mark.parametrize("text,position", [
        ("zz", 0),
        ("0xabzz", 2),
        ("ab  cd", 2),
        ("abcd\r\n", 4),
    ])
    def test_invalid_character_rejected(self, text, position):
        with pytest.raises(DecodeError) as exc_info:
            decode_hex(text)
        assert exc_info.value.details["position"] == position

    def test_double_prefix_rejected(self):
        with pytest.raises(DecodeError):
            decode_hex("0x0xab")


class TestEncodeHex:

    def test_lowercase_without_prefix(self):
        assert encode_hex(b"\xde\xad\xbe\xef") == "deadbeef"

    def test_with_prefix(self):
        assert encode_hex(b"\x01\x02", with_prefix=True) == "0x0102"

    def test_empty(self):
        assert encode_hex(b"") == ""
        assert encode_hex(b"", with_prefix=True) == "0x"


class TestPrefix:

    @pytest.mark.parametrize("text,expected", [
        ("0xab", True),
        ("0Xab", True),
        ("ab", False),
        ("", False),
        ("0", False),
        ("x0ab", False),
    ])
    def test_has_hex_prefix(self, text, expected):
        assert has_hex_prefix(text) is expected

    def test_strip_only_one_prefix(self):
        assert strip_hex_prefix("0x0xab") == "0xab"
        assert strip_hex_prefix("abcd") == "abcd"
