"""
Deep hash — the canonical signing message for bundle items.

    blob:  SHA-384( SHA-384("blob" + len) || SHA-384(data) )
    list:  acc = SHA-384("list" + len)
           for each child: acc = SHA-384( acc || deep_hash(child) )

The message signed for an item is the deep hash of
``["dataitem", "1", <signature type>, owner, target, anchor, raw tags, data]``.
Blobs are hashed straight from buffer views, so the payload is never copied.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Sequence, Union

if TYPE_CHECKING:
    from ans104.item import DataItem

Chunk = Union[bytes, bytearray, memoryview, Sequence["Chunk"]]

_FORMAT_NAME = b"dataitem"
_FORMAT_VERSION = b"1"


def _sha384(data: bytes | memoryview) -> bytes:
    return hashlib.sha384(data).digest()


def deep_hash(data: Chunk) -> bytes:
    """Hash a blob or an arbitrarily nested list of blobs."""
    if isinstance(data, (list, tuple)):
        acc = _sha384(b"list" + str(len(data)).encode("ascii"))
        for child in data:
            acc = _sha384(acc + deep_hash(child))
        return acc

    view = memoryview(data).cast("B")
    tag = b"blob" + str(len(view)).encode("ascii")
    return _sha384(_sha384(tag) + _sha384(view))


def signature_data(item: DataItem) -> bytes:
    """Build the 48-byte message that an item's signature covers."""
    return deep_hash([
        _FORMAT_NAME,
        _FORMAT_VERSION,
        str(item.signature_type).encode("ascii"),
        item.raw_owner,
        item.raw_target,
        item.raw_anchor,
        item.raw_tags,
        item.raw_data,
    ])
