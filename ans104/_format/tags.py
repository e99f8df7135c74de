"""
Tag block codec — Avro binary encoding of ``array<{name: bytes, value: bytes}>``.

Encoding:
    long    zig-zag varint (7 bits per byte, low group first, MSB = continue)
    bytes   long length + raw bytes
    array   one or more blocks of (long count, items...), ended by a count of 0.
            A negative count is followed by the block's byte size (a long).

The encoder always writes a single block, so encode(decode(b)) == b for any
block produced by this module or another canonical Avro writer.

Decoding is strict: truncated input, negative lengths, overlong varints and
trailing bytes all raise InvalidTagEncoding. A partial list is never returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from ans104.errors import InvalidTagEncoding

# Avro longs are 64-bit: at most 10 varint bytes
_MAX_VARINT_BYTES = 10


@dataclass(frozen=True)
class Tag:
    """A single name/value tag. Order and duplicates are meaningful."""

    name: bytes
    value: bytes

    @classmethod
    def from_text(cls, name: str, value: str) -> Tag:
        return cls(name.encode("utf-8"), value.encode("utf-8"))

    def to_text(self) -> tuple[str, str]:
        """Decode name and value as UTF-8 (replacing undecodable bytes)."""
        return (
            self.name.decode("utf-8", errors="replace"),
            self.value.decode("utf-8", errors="replace"),
        )


TagLike = Union[Tag, tuple]


def _as_bytes(field: str, value: bytes | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"Tag {field} must be bytes or str, got {type(value).__name__}")


def coerce_tag(tag: TagLike) -> Tag:
    """Accept a Tag or a (name, value) pair of bytes/str."""
    if isinstance(tag, Tag):
        if isinstance(tag.name, bytes) and isinstance(tag.value, bytes):
            return tag
        name, value = tag.name, tag.value
    else:
        name, value = tag
    return Tag(_as_bytes("name", name), _as_bytes("value", value))


# --- varint primitives ---

def _zigzag_encode(n: int) -> int:
    return (n << 1) ^ (n >> (n.bit_length() or 1))


def _zigzag_decode(z: int) -> int:
    return (z >> 1) ^ (-(z & 1))


def _write_long(out: bytearray, n: int) -> None:
    val = _zigzag_encode(n)
    while True:
        byte = val & 0x7F
        val >>= 7
        out.append(byte | 0x80 if val else byte)
        if not val:
            break


def _read_long(data: memoryview, pos: int) -> tuple[int, int]:
    result = 0
    shift = 0
    for _ in range(_MAX_VARINT_BYTES):
        if pos >= len(data):
            raise InvalidTagEncoding(f"Truncated varint at offset {pos}")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return _zigzag_decode(result), pos
        shift += 7
    raise InvalidTagEncoding(f"Varint longer than {_MAX_VARINT_BYTES} bytes at offset {pos}")


def _write_bytes(out: bytearray, value: bytes) -> None:
    _write_long(out, len(value))
    out += value


def _read_bytes(data: memoryview, pos: int) -> tuple[bytes, int]:
    length, pos = _read_long(data, pos)
    if length < 0:
        raise InvalidTagEncoding(f"Negative byte length {length} at offset {pos}")
    end = pos + length
    if end > len(data):
        raise InvalidTagEncoding(
            f"Byte string of length {length} at offset {pos} overruns tag block ({len(data)} bytes)"
        )
    return bytes(data[pos:end]), end


# --- public API ---

def decode_tags(data: bytes | bytearray | memoryview) -> list[Tag]:
    """Decode a tag block into an ordered list of tags.

    Raises:
        InvalidTagEncoding: If the block is malformed or has trailing bytes.
    """
    view = memoryview(data).cast("B")
    tags: list[Tag] = []
    pos = 0
    while True:
        count, pos = _read_long(view, pos)
        if count == 0:
            break
        if count < 0:
            count = -count
            _block_size, pos = _read_long(view, pos)
        for _ in range(count):
            name, pos = _read_bytes(view, pos)
            value, pos = _read_bytes(view, pos)
            tags.append(Tag(name, value))

    if pos != len(view):
        raise InvalidTagEncoding(f"{len(view) - pos} trailing bytes after tag array")
    return tags


def encode_tags(tags: Iterable[TagLike]) -> bytes:
    """Encode tags as a single-block Avro array. Deterministic.

    An empty list encodes to the single terminator byte ``b"\\x00"``.
    """
    items = [coerce_tag(t) for t in tags]
    out = bytearray()
    if items:
        _write_long(out, len(items))
        for tag in items:
            _write_bytes(out, tag.name)
            _write_bytes(out, tag.value)
    _write_long(out, 0)
    return bytes(out)
