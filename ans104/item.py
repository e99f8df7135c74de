"""
DataItem — zero-copy view over a single bundle item buffer.

Every ``raw_*`` accessor returns a memoryview slice of the original buffer;
text accessors (``signature``, ``owner``, ``data``, ...) and decoded tags are
derived copies. Construct from a ``bytearray`` to allow in-place signing;
``bytes`` gives a read-only item.

The buffer is a single mutable resource: writes through ``raw_signature`` or
``raw_owner`` are immediately visible to every other view of it. Callers
must not mutate the same buffer from more than one thread at a time.
"""

from __future__ import annotations

import hashlib
from typing import Any

from ans104._format.layout import Layout, compute_layout
from ans104._format.lengths import decode_length
from ans104._format.spec import ID_SIZE, SIGNATURE_TYPE_SIZE, b64url_decode, b64url_encode
from ans104._format.tags import Tag, decode_tags
from ans104._format.validator import MessageBuilder, verify as _verify
from ans104.deephash import signature_data
from ans104.errors import FieldLengthMismatch, TruncatedBuffer
from ans104.registry import DEFAULT_REGISTRY, SignatureRegistry, SignatureType


class DataItem:
    """A bundle item over a borrowed buffer.

    Usage:
        item = DataItem(raw_bytes)
        if item.is_valid():
            print(item.id, item.tags)
    """

    def __init__(
        self,
        binary: bytes | bytearray | memoryview,
        registry: SignatureRegistry | None = None,
        message_builder: MessageBuilder | None = None,
    ) -> None:
        self._binary = binary
        self._view = memoryview(binary).cast("B")
        self._registry = registry or DEFAULT_REGISTRY
        self._message_builder = message_builder or signature_data
        self._layout: Layout | None = None
        # Explicit identifier override, set through raw_id or id
        self._id: bytes | None = None

    @staticmethod
    def is_data_item(obj: Any) -> bool:
        return isinstance(obj, DataItem)

    # --- signature type ---

    @property
    def signature_config(self) -> SignatureType:
        if len(self._view) < SIGNATURE_TYPE_SIZE:
            raise TruncatedBuffer("signature type", SIGNATURE_TYPE_SIZE, len(self._view))
        return self._registry.resolve(decode_length(self._view[:SIGNATURE_TYPE_SIZE]))

    @property
    def signature_type(self) -> int:
        return self.signature_config.code

    @property
    def signature_length(self) -> int:
        return self.signature_config.signature_length

    @property
    def owner_length(self) -> int:
        return self.signature_config.owner_length

    @property
    def layout(self) -> Layout:
        """Section offsets. Cached: signing never moves a section."""
        if self._layout is None:
            self._layout = compute_layout(self._view, self.signature_config)
        return self._layout

    # --- signature ---

    @property
    def raw_signature(self) -> memoryview:
        layout = self.layout
        return self._view[layout.signature_start:layout.signature_end]

    @raw_signature.setter
    def raw_signature(self, signature: bytes) -> None:
        self._overwrite("signature", self.layout.signature_start, self.signature_length, signature)

    @property
    def signature(self) -> str:
        return b64url_encode(self.raw_signature)

    # --- owner ---

    @property
    def raw_owner(self) -> memoryview:
        layout = self.layout
        return self._view[layout.owner_start:layout.owner_end]

    @raw_owner.setter
    def raw_owner(self, pubkey: bytes) -> None:
        self._overwrite("raw owner (pubkey)", self.layout.owner_start, self.owner_length, pubkey)

    @property
    def owner(self) -> str:
        return b64url_encode(self.raw_owner)

    # --- target / anchor ---

    @property
    def raw_target(self) -> memoryview:
        start, end = self.layout.target_range
        return self._view[start:end]

    @property
    def target(self) -> str:
        return b64url_encode(self.raw_target)

    @property
    def raw_anchor(self) -> memoryview:
        start, end = self.layout.anchor_range
        return self._view[start:end]

    @property
    def anchor(self) -> str:
        """Anchor bytes as UTF-8 text (invalid sequences replaced)."""
        return bytes(self.raw_anchor).decode("utf-8", errors="replace")

    # --- tags ---

    @property
    def raw_tags(self) -> memoryview:
        start, end = self.layout.tags_range
        return self._view[start:end]

    @property
    def tags(self) -> list[Tag]:
        if self.layout.tags_count == 0:
            return []
        return decode_tags(self.raw_tags)

    @property
    def tags_b64url(self) -> list[dict[str, str]]:
        return [
            {"name": b64url_encode(t.name), "value": b64url_encode(t.value)}
            for t in self.tags
        ]

    # --- data ---

    @property
    def data_start(self) -> int:
        return self.layout.data_start

    @property
    def raw_data(self) -> memoryview:
        return self._view[self.layout.data_start:]

    @property
    def data(self) -> str:
        return b64url_encode(self.raw_data)

    # --- identifier ---

    @property
    def raw_id(self) -> bytes:
        if self._id is not None:
            return self._id
        return hashlib.sha256(self.raw_signature).digest()

    @raw_id.setter
    def raw_id(self, value: bytes) -> None:
        if len(value) != ID_SIZE:
            raise FieldLengthMismatch("id", ID_SIZE, len(value))
        self._id = bytes(value)

    @property
    def id(self) -> str:
        return b64url_encode(self.raw_id)

    @id.setter
    def id(self, value: str) -> None:
        self.raw_id = b64url_decode(value)

    # --- signing ---

    def get_signature_data(self) -> bytes:
        return self._message_builder(self)

    def set_signature(self, signature: bytes) -> None:
        """Write a signature in place. Drops any identifier override."""
        self.raw_signature = signature
        self._id = None

    def sign(self, signer: Any) -> bytes:
        """Sign with ``signer`` and return the new raw id.

        The owner field is set to the signer's public key first, so an
        unsigned skeleton with a zero-filled owner can be signed directly.

        Raises:
            ValueError: If the signer's type differs from the item's.
        """
        if signer.signature_type != self.signature_type:
            raise ValueError(
                f"Signer type {signer.signature_type} does not match item type {self.signature_type}"
            )
        if self.raw_owner != signer.public_key:
            self.raw_owner = signer.public_key

        signature = signer.sign(self.get_signature_data())
        self.set_signature(signature)
        return self.raw_id

    def is_signed(self) -> bool:
        """True once an id override is set or the signature field is non-zero."""
        return self._id is not None or any(self.raw_signature)

    def is_valid(self) -> bool:
        """Verify this item. Structural defects raise; bad signatures return False."""
        return _verify(self._view, self._registry, self._message_builder)

    @staticmethod
    def verify(
        buffer: bytes | bytearray | memoryview,
        registry: SignatureRegistry | None = None,
        message_builder: MessageBuilder | None = None,
    ) -> bool:
        return _verify(buffer, registry, message_builder)

    # --- projection ---

    def get_raw(self) -> bytes | bytearray | memoryview:
        """The backing buffer itself (not a copy). Do not resize it."""
        return self._binary

    def to_json(self) -> dict[str, Any]:
        return {
            "signature": self.signature,
            "owner": self.owner,
            "target": self.target,
            "tags": self.tags_b64url,
            "data": self.data,
        }

    def __len__(self) -> int:
        return len(self._view)

    def __repr__(self) -> str:
        code = decode_length(self._view[:SIGNATURE_TYPE_SIZE])
        return f"DataItem(type={code}, size={len(self._view)})"

    def _overwrite(self, field: str, start: int, length: int, value: bytes) -> None:
        value = bytes(value)
        if len(value) != length:
            raise FieldLengthMismatch(field, length, len(value))
        if self._view.readonly:
            raise TypeError("Item buffer is read-only; construct the item from a bytearray to mutate it")
        self._view[start:start + length] = value
