"""
Internal bundle item format engine — offsets, tag block codec, validation.

This is an internal package; the public API is re-exported from ``ans104``.

Format: ANS-104 data item (signature type 1 = Arweave, 2 = Ed25519)
"""

from ans104._format.spec import MIN_BINARY_SIZE, MAX_TAGS_SIZE
from ans104._format.lengths import decode_length, encode_length
from ans104._format.tags import Tag, decode_tags, encode_tags
from ans104._format.layout import Layout, compute_layout
from ans104._format.validator import ValidationResult, check_structure, validate, verify
from ans104._format.writer import assemble, create_data
