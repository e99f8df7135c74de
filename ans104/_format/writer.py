"""
Writer — assembles new bundle items and writes them to disk.

Assembly produces a mutable skeleton: the signature field is zero-filled and
is overwritten in place by ``DataItem.sign()``. Field sizes are fixed by the
signature type, so signing never changes the buffer length.
"""

from __future__ import annotations

import os
import tempfile
from typing import TYPE_CHECKING, Any, Iterable

from ans104._format.lengths import encode_length
from ans104._format.spec import (
    FLAG_ABSENT, FLAG_PRESENT, MAX_TAGS_SIZE, OPTIONAL_FIELD_DATA_SIZE,
    SIG_ARWEAVE, SIGNATURE_TYPE_SIZE,
)
from ans104._format.tags import TagLike, coerce_tag, encode_tags
from ans104.errors import FieldLengthMismatch, TagBlockTooLarge
from ans104.registry import DEFAULT_REGISTRY, SignatureRegistry

if TYPE_CHECKING:
    from ans104.item import DataItem


def _optional_field(name: str, value: bytes | None) -> bytes:
    if value is None or len(value) == 0:
        return bytes([FLAG_ABSENT])
    if len(value) != OPTIONAL_FIELD_DATA_SIZE:
        raise FieldLengthMismatch(name, OPTIONAL_FIELD_DATA_SIZE, len(value))
    return bytes([FLAG_PRESENT]) + bytes(value)


def serialize_tags(tags: Iterable[TagLike] | None) -> tuple[int, bytes]:
    """Encode tags for an item header. Returns (count, tag block).

    No tags means an empty tag block (not the one-byte empty Avro array).
    """
    items = [coerce_tag(t) for t in tags or ()]
    if not items:
        return 0, b""
    raw = encode_tags(items)
    if len(raw) > MAX_TAGS_SIZE:
        raise TagBlockTooLarge(len(raw), MAX_TAGS_SIZE)
    return len(items), raw


def assemble(
    data: bytes | str,
    *,
    owner: bytes | None = None,
    signature_type: int = SIG_ARWEAVE,
    target: bytes | None = None,
    anchor: bytes | None = None,
    tags: Iterable[TagLike] | None = None,
    registry: SignatureRegistry | None = None,
) -> bytearray:
    """Build an unsigned item buffer.

    Raises:
        UnknownSignatureType: If ``signature_type`` is not registered.
        FieldLengthMismatch: If owner/target/anchor have the wrong size.
        TagBlockTooLarge: If the encoded tags exceed MAX_TAGS_SIZE.
    """
    sig_type = (registry or DEFAULT_REGISTRY).resolve(signature_type)
    if isinstance(data, str):
        data = data.encode("utf-8")

    if owner is None:
        owner = bytes(sig_type.owner_length)
    if len(owner) != sig_type.owner_length:
        raise FieldLengthMismatch("owner", sig_type.owner_length, len(owner))

    tags_count, raw_tags = serialize_tags(tags)

    out = bytearray()
    out += encode_length(sig_type.code, SIGNATURE_TYPE_SIZE)
    out += bytes(sig_type.signature_length)
    out += owner
    out += _optional_field("target", target)
    out += _optional_field("anchor", anchor)
    out += encode_length(tags_count)
    out += encode_length(len(raw_tags))
    out += raw_tags
    out += data
    return out


def create_data(
    data: bytes | str,
    signer: Any = None,
    *,
    owner: bytes | None = None,
    signature_type: int = SIG_ARWEAVE,
    target: bytes | None = None,
    anchor: bytes | None = None,
    tags: Iterable[TagLike] | None = None,
    registry: SignatureRegistry | None = None,
) -> DataItem:
    """Create an unsigned item. With a signer, its type and public key are used.

    Usage:
        item = create_data(b"hello", signer, tags=[("Content-Type", "text/plain")])
        item.sign(signer)
    """
    from ans104.item import DataItem

    if signer is not None:
        signature_type = signer.signature_type
        owner = signer.public_key

    buffer = assemble(
        data,
        owner=owner,
        signature_type=signature_type,
        target=target,
        anchor=anchor,
        tags=tags,
        registry=registry,
    )
    return DataItem(buffer, registry=registry)


def write(item: DataItem, path: str, mode: int = 0o644) -> int:
    """Write an item's raw bytes to file atomically. Returns bytes written."""
    data = item.get_raw()
    dir_name = os.path.dirname(os.path.abspath(path)) or "."
    fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=".item.tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    return len(data)
