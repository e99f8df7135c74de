"""Shared fixtures: hand-built item buffers for malformed-input tests."""

from __future__ import annotations

import pytest


def _build_raw(
    *,
    code: int = 1,
    sig_len: int = 512,
    owner_len: int = 512,
    signature: bytes | None = None,
    owner: bytes | None = None,
    target_flag: int = 0,
    target: bytes = b"",
    anchor_flag: int = 0,
    anchor: bytes = b"",
    tags_count: int = 0,
    tags_size: int | None = None,
    tags_block: bytes = b"",
    data: bytes = b"",
) -> bytearray:
    """Assemble raw item bytes field by field, without any validation."""
    out = bytearray()
    out += code.to_bytes(2, "little")
    out += signature if signature is not None else bytes(sig_len)
    out += owner if owner is not None else bytes(owner_len)
    out += bytes([target_flag]) + target
    out += bytes([anchor_flag]) + anchor
    out += tags_count.to_bytes(8, "little")
    out += (len(tags_block) if tags_size is None else tags_size).to_bytes(8, "little")
    out += tags_block
    out += data
    return out


@pytest.fixture
def build_raw():
    """Factory for raw item buffers (see ``_build_raw`` for keywords)."""
    return _build_raw


@pytest.fixture
def hello_raw():
    """Arweave-type item: no target/anchor/tags, payload b"hello", zero signature."""
    return _build_raw(data=b"hello")
