"""
ans104 — parse, validate, sign and serialize ANS-104 bundle items.

Architecture:
    _format/    offsets, tag block codec, structural validation, assembly
    registry    signature type code -> field lengths + verify capability
    signers     RSA-PSS (Arweave) and Ed25519 capabilities (requires `cryptography`)
    deephash    canonical signing message
    item        DataItem zero-copy view
"""

__version__ = "0.1.0"

from ans104.errors import (
    DataItemError,
    FieldLengthMismatch,
    InvalidPresenceFlag,
    InvalidTagEncoding,
    SignatureInvalid,
    StructuralError,
    TagBlockTooLarge,
    TagCountMismatch,
    TooSmall,
    TruncatedBuffer,
    UnknownSignatureType,
)
from ans104._format import (
    Layout,
    Tag,
    ValidationResult,
    check_structure,
    compute_layout,
    create_data,
    decode_tags,
    encode_tags,
    validate,
    verify,
)
from ans104.registry import DEFAULT_REGISTRY, SignatureRegistry, SignatureType
from ans104.item import DataItem

__all__ = [
    "DataItem",
    "DataItemError",
    "DEFAULT_REGISTRY",
    "FieldLengthMismatch",
    "InvalidPresenceFlag",
    "InvalidTagEncoding",
    "Layout",
    "SignatureInvalid",
    "SignatureRegistry",
    "SignatureType",
    "StructuralError",
    "Tag",
    "TagBlockTooLarge",
    "TagCountMismatch",
    "TooSmall",
    "TruncatedBuffer",
    "UnknownSignatureType",
    "ValidationResult",
    "check_structure",
    "compute_layout",
    "create_data",
    "decode_tags",
    "encode_tags",
    "validate",
    "verify",
]
