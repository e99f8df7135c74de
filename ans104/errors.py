"""
Error taxonomy for bundle items.

Structural errors mean the buffer is malformed and are always raised before
any cryptographic work is attempted. ``SignatureInvalid`` means the buffer
is well formed but was not signed by the owner it claims.

Every error carries a short ``reason`` code so callers (and
``validate()``) can report the failure without string matching.
"""

from __future__ import annotations

# Reason codes
TOO_SMALL = "too_small"
UNKNOWN_SIGNATURE_TYPE = "unknown_signature_type"
INVALID_PRESENCE_FLAG = "invalid_presence_flag"
TRUNCATED_BUFFER = "truncated_buffer"
TAG_BLOCK_TOO_LARGE = "tag_block_too_large"
INVALID_TAG_ENCODING = "invalid_tag_encoding"
TAG_COUNT_MISMATCH = "tag_count_mismatch"
SIGNATURE_INVALID = "signature_invalid"
FIELD_LENGTH_MISMATCH = "field_length_mismatch"

STRUCTURAL_REASONS = frozenset({
    TOO_SMALL, UNKNOWN_SIGNATURE_TYPE, INVALID_PRESENCE_FLAG, TRUNCATED_BUFFER,
    TAG_BLOCK_TOO_LARGE, INVALID_TAG_ENCODING, TAG_COUNT_MISMATCH,
})


class DataItemError(Exception):
    """Base class for all bundle item errors."""

    reason = "error"


class StructuralError(DataItemError):
    """The buffer is not a well-formed bundle item."""

    reason = "structural"


class TooSmall(StructuralError):
    reason = TOO_SMALL


class UnknownSignatureType(StructuralError):
    reason = UNKNOWN_SIGNATURE_TYPE

    def __init__(self, code: int) -> None:
        super().__init__(f"Unknown signature type: {code}")
        self.code = code


class InvalidPresenceFlag(StructuralError):
    reason = INVALID_PRESENCE_FLAG

    def __init__(self, field: str, offset: int, value: int) -> None:
        super().__init__(
            f"Invalid {field} presence flag {value} at offset {offset} (expected 0 or 1)"
        )
        self.field = field
        self.offset = offset
        self.value = value


class TruncatedBuffer(StructuralError):
    reason = TRUNCATED_BUFFER

    def __init__(self, what: str, needed: int, size: int) -> None:
        super().__init__(f"Buffer too short for {what}: need {needed} bytes, have {size}")
        self.needed = needed
        self.size = size


class TagBlockTooLarge(StructuralError):
    reason = TAG_BLOCK_TOO_LARGE

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Tag block is {size} bytes (max {limit})")
        self.size = size
        self.limit = limit


class InvalidTagEncoding(StructuralError):
    reason = INVALID_TAG_ENCODING


class TagCountMismatch(StructuralError):
    reason = TAG_COUNT_MISMATCH

    def __init__(self, declared: int, decoded: int) -> None:
        super().__init__(f"Declared {declared} tags but decoded {decoded}")
        self.declared = declared
        self.decoded = decoded


class SignatureInvalid(DataItemError):
    """Signature does not verify against the owner and signing message."""

    reason = SIGNATURE_INVALID


class FieldLengthMismatch(DataItemError, ValueError):
    """A fixed-width field was given a value of the wrong length."""

    reason = FIELD_LENGTH_MISMATCH

    def __init__(self, field: str, expected: int, got: int) -> None:
        super().__init__(f"Expected {field} to be {expected} bytes, got {got} bytes.")
        self.field = field
        self.expected = expected
        self.got = got
