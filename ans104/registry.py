"""
Signature type registry — maps the 2-byte type code to field lengths and a
verify capability.

Registries are immutable: ``extend()`` returns a new registry, so adding a
signature type never changes behavior for code holding the default one.
"""

from __future__ import annotations

import types
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator

from ans104._format.spec import SIG_ARWEAVE, SIG_ED25519
from ans104.errors import UnknownSignatureType
from ans104.signers import (
    ARWEAVE_OWNER_LENGTH, ED25519_OWNER_LENGTH, ED25519_SIGNATURE_LENGTH,
    verify_arweave, verify_ed25519,
)

Verifier = Callable[[bytes, bytes, bytes], bool]

_MAX_CODE = 0xFFFF


@dataclass(frozen=True)
class SignatureType:
    """Descriptor for one signature scheme.

    Attributes:
        code: The 2-byte code stored at the start of every item.
        name: Human-readable scheme name.
        signature_length: Fixed signature field size in bytes.
        owner_length: Fixed owner (public key) field size in bytes.
        verify: ``verify(owner, message, signature) -> bool``.
    """

    code: int
    name: str
    signature_length: int
    owner_length: int
    verify: Verifier = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        if not 0 <= self.code <= _MAX_CODE:
            raise ValueError(f"Signature type code must fit in 2 bytes, got {self.code}")
        if self.signature_length <= 0 or self.owner_length <= 0:
            raise ValueError(f"Signature type {self.code}: lengths must be positive")


class SignatureRegistry:
    """Immutable lookup table of signature types keyed by code."""

    def __init__(self, entries: Iterable[SignatureType] = ()) -> None:
        table: dict[int, SignatureType] = {}
        for entry in entries:
            if entry.code in table:
                raise ValueError(f"Duplicate signature type code: {entry.code}")
            table[entry.code] = entry
        self._table = types.MappingProxyType(table)

    def resolve(self, code: int) -> SignatureType:
        """Return the descriptor for ``code``.

        Raises:
            UnknownSignatureType: If the code is not registered.
        """
        try:
            return self._table[code]
        except KeyError:
            raise UnknownSignatureType(code) from None

    def extend(self, *entries: SignatureType) -> SignatureRegistry:
        """Return a new registry with ``entries`` added."""
        return SignatureRegistry([*self._table.values(), *entries])

    @property
    def codes(self) -> list[int]:
        return sorted(self._table)

    def __contains__(self, code: object) -> bool:
        return code in self._table

    def __iter__(self) -> Iterator[SignatureType]:
        return iter(self._table[c] for c in self.codes)

    def __len__(self) -> int:
        return len(self._table)


ARWEAVE = SignatureType(
    code=SIG_ARWEAVE,
    name="arweave",
    signature_length=ARWEAVE_OWNER_LENGTH,
    owner_length=ARWEAVE_OWNER_LENGTH,
    verify=verify_arweave,
)

ED25519 = SignatureType(
    code=SIG_ED25519,
    name="ed25519",
    signature_length=ED25519_SIGNATURE_LENGTH,
    owner_length=ED25519_OWNER_LENGTH,
    verify=verify_ed25519,
)

DEFAULT_REGISTRY = SignatureRegistry([ARWEAVE, ED25519])


def resolve(code: int) -> SignatureType:
    """Resolve ``code`` against the default registry."""
    return DEFAULT_REGISTRY.resolve(code)
