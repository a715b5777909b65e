"""Utility functions for the MEV-Boost account abstraction SDK."""

from collections.abc import Mapping, Sequence
from typing import Any

from eth_typing import HexStr
from hexbytes import HexBytes
from web3 import Web3

from .exceptions import ValidationError


def to_bytes(value: Any) -> bytes:
    """Coerce hex strings, bytes-like values and ``None`` into bytes."""
    if value is None:
        return b""
    if isinstance(value, bytes | bytearray | HexBytes):
        return bytes(value)
    if isinstance(value, str):
        if value in ("", "0x", "0X"):
            return b""
        if not value.lower().startswith("0x"):
            raise ValidationError("Expected 0x-prefixed hex string", field="bytes", value=value)
        try:
            return Web3.to_bytes(hexstr=HexStr(value))
        except ValueError as exc:
            raise ValidationError("Invalid hex string", field="bytes", value=value) from exc
    raise ValidationError(f"Cannot convert {type(value).__name__} to bytes", value=value)


def to_quantity(value: Any) -> int:
    """Coerce an int, decimal string or 0x quantity into a non-negative int."""
    if isinstance(value, bool):
        raise ValidationError("Boolean is not a quantity", field="quantity", value=value)
    if isinstance(value, int):
        quantity = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            quantity = int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError as exc:
            raise ValidationError("Invalid quantity", field="quantity", value=value) from exc
    else:
        raise ValidationError(
            f"Cannot convert {type(value).__name__} to quantity", field="quantity", value=value
        )

    if quantity < 0:
        raise ValidationError("Quantity cannot be negative", field="quantity", value=value)
    return quantity


def hex_concat(*parts: Any) -> HexBytes:
    """Concatenate hex strings and byte values."""
    return HexBytes(b"".join(to_bytes(part) for part in parts))


def to_0x_hex(value: Any) -> str:
    return HexBytes(to_bytes(value)).to_0x_hex()


def serialise_event(event: Any) -> Any:
    """Serialise web3 log/event objects into JSON-friendly structures."""
    if event is None:
        return None
    if isinstance(event, Mapping):
        return {key: serialise_event(value) for key, value in event.items()}
    if isinstance(event, Sequence) and not isinstance(event, str | bytes | bytearray | HexBytes):
        return [serialise_event(item) for item in event]
    if isinstance(event, bytes | bytearray | HexBytes):
        return HexBytes(event).to_0x_hex()
    return event
