"""
Structural validator — decides whether an untrusted buffer is a well-formed
bundle item before any derived offset is trusted, then hands the signature
to the verify capability of its signature type.

Check order (short-circuits on first failure):
  1. buffer length >= MIN_BINARY_SIZE              TooSmall
  2. signature type code is registered             UnknownSignatureType
  3. layout computes within the buffer             InvalidPresenceFlag / TruncatedBuffer
  4. declared tag block size <= MAX_TAGS_SIZE      TagBlockTooLarge
  5. tag block decodes to the declared count       InvalidTagEncoding / TagCountMismatch
  6. signature verifies                            SignatureInvalid

Structural checks (1-5) always complete before the cryptographic call.
Nothing here mutates the buffer or caches results between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from ans104._format.layout import Layout, compute_layout
from ans104._format.lengths import decode_length
from ans104._format.spec import MAX_TAGS_SIZE, MIN_BINARY_SIZE, SIGNATURE_TYPE_SIZE
from ans104._format.tags import decode_tags
from ans104.errors import (
    STRUCTURAL_REASONS, SignatureInvalid, StructuralError, TagCountMismatch, TooSmall,
)
from ans104.registry import DEFAULT_REGISTRY, SignatureRegistry, SignatureType

if TYPE_CHECKING:
    from ans104.item import DataItem

log = logging.getLogger(__name__)

MessageBuilder = Callable[["DataItem"], bytes]


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of ``validate()``.

    Attributes:
        ok: True only if the item is well formed and the signature verifies.
        reason: Reason code from ``ans104.errors`` when not ok.
        detail: Human-readable description of the failure.
    """

    ok: bool
    reason: str | None = None
    detail: str = ""

    @property
    def is_structural(self) -> bool:
        """True if the item was rejected as corrupt rather than unsigned."""
        return not self.ok and self.reason in STRUCTURAL_REASONS

    def __bool__(self) -> bool:
        return self.ok


def check_structure(
    buffer: bytes | bytearray | memoryview,
    registry: SignatureRegistry | None = None,
) -> tuple[SignatureType, Layout]:
    """Run structural checks 1-5.

    Returns:
        (signature type, layout) of the well-formed item.

    Raises:
        StructuralError: The specific subclass for the first failed check.
    """
    size = len(buffer)
    if size < MIN_BINARY_SIZE:
        raise TooSmall(f"Item is {size} bytes (min {MIN_BINARY_SIZE})")

    view = memoryview(buffer).cast("B")
    registry = registry or DEFAULT_REGISTRY
    sig_type = registry.resolve(decode_length(view[:SIGNATURE_TYPE_SIZE]))

    layout = compute_layout(view, sig_type, max_tags_size=MAX_TAGS_SIZE)

    if layout.tags_count > 0:
        tags = decode_tags(view[layout.tags_start:layout.data_start])
        if len(tags) != layout.tags_count:
            raise TagCountMismatch(layout.tags_count, len(tags))

    return sig_type, layout


def verify(
    buffer: bytes | bytearray | memoryview,
    registry: SignatureRegistry | None = None,
    message_builder: MessageBuilder | None = None,
) -> bool:
    """Check structure, then verify the signature.

    Returns:
        True if the signature verifies, False if it does not.

    Raises:
        StructuralError: If the buffer is malformed (never masked as False).
    """
    from ans104.deephash import signature_data
    from ans104.item import DataItem

    sig_type, _layout = check_structure(buffer, registry)

    item = DataItem(buffer, registry=registry)
    builder = message_builder or signature_data
    message = builder(item)

    ok = sig_type.verify(bytes(item.raw_owner), message, bytes(item.raw_signature))
    if not ok:
        log.debug("Signature rejected for %s item %s", sig_type.name, item.id)
    return ok


def require_valid(
    buffer: bytes | bytearray | memoryview,
    registry: SignatureRegistry | None = None,
    message_builder: MessageBuilder | None = None,
) -> None:
    """Like ``verify()`` but raises SignatureInvalid instead of returning False."""
    if not verify(buffer, registry, message_builder):
        raise SignatureInvalid("Signature does not verify against owner")


def validate(
    buffer: bytes | bytearray | memoryview,
    registry: SignatureRegistry | None = None,
    message_builder: MessageBuilder | None = None,
) -> ValidationResult:
    """Validate a buffer and report the outcome without raising.

    Structural defects and signature rejection are both folded into the
    result; ``result.reason`` tells them apart.
    """
    try:
        require_valid(buffer, registry, message_builder)
    except StructuralError as e:
        log.debug("Rejected malformed item: %s", e)
        return ValidationResult(ok=False, reason=e.reason, detail=str(e))
    except SignatureInvalid as e:
        return ValidationResult(ok=False, reason=e.reason, detail=str(e))
    return ValidationResult(ok=True)
