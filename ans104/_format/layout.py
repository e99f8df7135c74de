"""
Layout calculator — derives every section offset of a bundle item buffer.

The computation is a strict left-to-right chain: the anchor offset depends on
the target presence flag, the tag header offset depends on the anchor flag,
and the data offset depends on the declared tag block size. Every offset is
bounds-checked against the buffer before anything at that offset is read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ans104._format.lengths import decode_length
from ans104._format.spec import (
    FLAG_ABSENT, FLAG_PRESENT, LENGTH_FIELD_SIZE, OPTIONAL_FIELD_SIZE,
    PRESENCE_FLAG_SIZE, SIGNATURE_START,
)
from ans104.errors import InvalidPresenceFlag, TagBlockTooLarge, TruncatedBuffer

if TYPE_CHECKING:
    from ans104.registry import SignatureType


@dataclass(frozen=True)
class Layout:
    """Byte offsets of every section in one bundle item buffer."""

    signature_start: int
    owner_start: int
    target_start: int
    anchor_start: int
    tags_count_start: int
    tags_size_start: int
    tags_start: int
    data_start: int
    target_present: bool
    anchor_present: bool
    tags_count: int
    tags_size: int

    @property
    def signature_end(self) -> int:
        return self.owner_start

    @property
    def owner_end(self) -> int:
        return self.target_start

    @property
    def target_range(self) -> tuple[int, int]:
        """(start, end) of the target bytes; empty when absent."""
        start = self.target_start + PRESENCE_FLAG_SIZE
        if self.target_present:
            return start, self.anchor_start
        return start, start

    @property
    def anchor_range(self) -> tuple[int, int]:
        """(start, end) of the anchor bytes; empty when absent."""
        start = self.anchor_start + PRESENCE_FLAG_SIZE
        if self.anchor_present:
            return start, self.tags_count_start
        return start, start

    @property
    def tags_range(self) -> tuple[int, int]:
        return self.tags_start, self.data_start


def _require(end: int, size: int, what: str) -> None:
    if end > size:
        raise TruncatedBuffer(what, end, size)


def _read_flag(buffer: memoryview, offset: int, field: str) -> bool:
    _require(offset + PRESENCE_FLAG_SIZE, size=len(buffer), what=f"{field} presence flag")
    flag = buffer[offset]
    if flag == FLAG_PRESENT:
        _require(offset + OPTIONAL_FIELD_SIZE, size=len(buffer), what=field)
        return True
    if flag == FLAG_ABSENT:
        return False
    raise InvalidPresenceFlag(field, offset, flag)


def compute_layout(
    buffer: bytes | bytearray | memoryview,
    sig_type: SignatureType,
    max_tags_size: int | None = None,
) -> Layout:
    """Compute the layout of ``buffer`` for the resolved signature type.

    Args:
        buffer: The raw item bytes.
        sig_type: Descriptor for the code stored in bytes [0, 2).
        max_tags_size: If given, a declared tag block length above it raises
            TagBlockTooLarge as soon as it is read.

    Raises:
        TruncatedBuffer: If any section would extend past the buffer.
        InvalidPresenceFlag: If a target/anchor flag is neither 0 nor 1.
        TagBlockTooLarge: See ``max_tags_size``.
    """
    view = memoryview(buffer).cast("B")
    size = len(view)

    owner_start = SIGNATURE_START + sig_type.signature_length
    _require(owner_start, size, "signature")
    target_start = owner_start + sig_type.owner_length
    _require(target_start, size, "owner")

    target_present = _read_flag(view, target_start, "target")
    anchor_start = target_start + (OPTIONAL_FIELD_SIZE if target_present else PRESENCE_FLAG_SIZE)

    anchor_present = _read_flag(view, anchor_start, "anchor")
    tags_count_start = anchor_start + (OPTIONAL_FIELD_SIZE if anchor_present else PRESENCE_FLAG_SIZE)

    tags_size_start = tags_count_start + LENGTH_FIELD_SIZE
    tags_start = tags_size_start + LENGTH_FIELD_SIZE
    _require(tags_start, size, "tag header")

    tags_count = decode_length(view[tags_count_start:tags_size_start])
    tags_size = decode_length(view[tags_size_start:tags_start])
    if max_tags_size is not None and tags_size > max_tags_size:
        raise TagBlockTooLarge(tags_size, max_tags_size)

    data_start = tags_start + tags_size
    _require(data_start, size, "tag block")

    return Layout(
        signature_start=SIGNATURE_START,
        owner_start=owner_start,
        target_start=target_start,
        anchor_start=anchor_start,
        tags_count_start=tags_count_start,
        tags_size_start=tags_size_start,
        tags_start=tags_start,
        data_start=data_start,
        target_present=target_present,
        anchor_present=anchor_present,
        tags_count=tags_count,
        tags_size=tags_size,
    )
