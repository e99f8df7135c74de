"""
Bundle item binary format (ANS-104 data item).

Layout (all integers little-endian, offsets from start of buffer):
    [0, 2)              signature type code
    [2, 2+S)            signature        (S from the signature type registry)
    [2+S, 2+S+O)        owner public key (O from the signature type registry)
    1 or 33 bytes       target presence flag (0/1) + 32-byte target if present
    1 or 33 bytes       anchor presence flag (0/1) + 32-byte anchor if present
    8 bytes             tag count
    8 bytes             tag block byte length N
    N bytes             tag block (Avro array of {name: bytes, value: bytes})
    remainder           opaque payload

Every offset after the owner depends on the presence flag immediately before
it, so the layout is always computed left to right.

Identifier:
    SHA-256 of the raw signature bytes, rendered as unpadded base64url.
"""

from __future__ import annotations

import base64

# Signature type codes
SIG_ARWEAVE = 1
SIG_ED25519 = 2

# Fixed field sizes
SIGNATURE_TYPE_SIZE = 2
SIGNATURE_START = SIGNATURE_TYPE_SIZE
PRESENCE_FLAG_SIZE = 1
OPTIONAL_FIELD_DATA_SIZE = 32
OPTIONAL_FIELD_SIZE = PRESENCE_FLAG_SIZE + OPTIONAL_FIELD_DATA_SIZE  # 33
LENGTH_FIELD_SIZE = 8  # tag count and tag block size

FLAG_ABSENT = 0
FLAG_PRESENT = 1

# Safety limits
MIN_BINARY_SIZE = 80
MAX_TAGS_SIZE = 4096  # declared tag block length ceiling

# Identifier digest size (SHA-256)
ID_SIZE = 32

# Arweave RSA-PSS public exponent (owner carries only the modulus)
ARWEAVE_PUBLIC_EXPONENT = 65537


def b64url_encode(data: bytes | bytearray | memoryview) -> str:
    """Encode bytes as URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(text: str) -> bytes:
    """Decode URL-safe base64 with or without padding."""
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))
