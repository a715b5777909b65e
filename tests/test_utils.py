"""Tests for utility functions."""

import pytest
from hexbytes import HexBytes

from mevboost_aa.exceptions import ValidationError
from mevboost_aa.utils import hex_concat, serialise_event, to_0x_hex, to_bytes, to_quantity


class TestToBytes:
    """Test byte coercion."""

    def test_empty_values(self):
        assert to_bytes(None) == b""
        assert to_bytes("0x") == b""
        assert to_bytes("") == b""

    def test_hex_string(self):
        assert to_bytes("0x0a0B") == b"\x0a\x0b"

    def test_bytes_like(self):
        assert to_bytes(bytearray(b"\x01")) == b"\x01"
        assert to_bytes(HexBytes("0x02")) == b"\x02"

    def test_unprefixed_string_rejected(self):
        with pytest.raises(ValidationError):
            to_bytes("0a0b")

    def test_unsupported_type_rejected(self):
        with pytest.raises(ValidationError):
            to_bytes(12)


class TestToQuantity:
    """Test quantity coercion."""

    def test_hex_and_decimal(self):
        assert to_quantity("0x1f") == 31
        assert to_quantity("31") == 31
        assert to_quantity(31) == 31

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            to_quantity(-1)

    def test_garbage_rejected(self):
        with pytest.raises(ValidationError):
            to_quantity("lots")


def test_hex_concat():
    assert hex_concat("0x01", b"\x02", HexBytes("0x03")) == HexBytes("0x010203")
    assert to_0x_hex(b"\xab") == "0xab"


def test_serialise_event():
    event = {
        "args": {"userOpHash": HexBytes("0x" + "11" * 32), "amount": 5},
        "blockNumber": 7,
        "topics": [b"\x01"],
    }

    assert serialise_event(event) == {
        "args": {"userOpHash": "0x" + "11" * 32, "amount": 5},
        "blockNumber": 7,
        "topics": ["0x01"],
    }
