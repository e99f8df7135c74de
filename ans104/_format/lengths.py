"""
Fixed-width little-endian unsigned integers (signature type, tag count, tag size).
"""

from __future__ import annotations

from ans104._format.spec import LENGTH_FIELD_SIZE


def decode_length(data: bytes | bytearray | memoryview) -> int:
    """Decode an unsigned little-endian integer of any width.

    Callers guarantee the range is within the buffer; an empty range is 0.
    """
    return int.from_bytes(data, "little")


def encode_length(value: int, width: int = LENGTH_FIELD_SIZE) -> bytes:
    """Encode ``value`` as a zero-padded little-endian integer of ``width`` bytes.

    Raises:
        ValueError: If value is negative or does not fit in ``width`` bytes.
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative length: {value}")
    if value >= 1 << (8 * width):
        raise ValueError(f"Length {value} does not fit in {width} bytes")
    return value.to_bytes(width, "little")
