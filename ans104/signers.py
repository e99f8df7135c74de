"""
Signing and verification capabilities, one per signature type.

- Arweave (type 1): RSA-PSS 4096 / SHA-256 / MGF1-SHA256. The owner field is
  the 512-byte big-endian modulus; the public exponent is always 65537.
- Ed25519 (type 2): raw 32-byte public key, 64-byte signature.

A signer is any object with ``signature_type`` (int), ``public_key``
(owner bytes) and ``sign(message) -> bytes``. Verify functions take
``(owner, message, signature)`` and fail closed: any invalid signature or
unusable key returns False.

The `cryptography` package is lazily imported — a missing dependency produces
a clear error message. Install with: pip install ans104-items[signing]
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ans104._format.spec import (
    ARWEAVE_PUBLIC_EXPONENT, SIG_ARWEAVE, SIG_ED25519,
    b64url_decode, b64url_encode,
)

log = logging.getLogger(__name__)

ARWEAVE_KEY_BITS = 4096
ARWEAVE_OWNER_LENGTH = ARWEAVE_KEY_BITS // 8  # 512
ARWEAVE_SALT_LENGTH = 32
ED25519_OWNER_LENGTH = 32
ED25519_SIGNATURE_LENGTH = 64


def _import_cryptography():
    """Lazily import the cryptography primitives used here.

    Raises ImportError with a helpful message if not installed.
    """
    try:
        from cryptography.exceptions import InvalidSignature
        from cryptography.hazmat.primitives import hashes
        from cryptography.hazmat.primitives.asymmetric import ed25519, padding, rsa

        return InvalidSignature, hashes, padding, rsa, ed25519
    except ImportError:
        raise ImportError(
            "cryptography is required for signing and verification. "
            "Install with: pip install ans104-items[signing]"
        )


def _b64url_int(text: str) -> int:
    return int.from_bytes(b64url_decode(text), "big")


def _int_b64url(value: int) -> str:
    return b64url_encode(value.to_bytes((value.bit_length() + 7) // 8 or 1, "big"))


# --- Arweave (RSA-PSS) ---

def verify_arweave(owner: bytes, message: bytes, signature: bytes) -> bool:
    """Verify an RSA-PSS signature against a 512-byte modulus owner."""
    InvalidSignature, hashes, padding, rsa, _ = _import_cryptography()

    try:
        public_key = rsa.RSAPublicNumbers(
            ARWEAVE_PUBLIC_EXPONENT, int.from_bytes(owner, "big")
        ).public_key()
        public_key.verify(
            bytes(signature),
            bytes(message),
            padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.AUTO),
            hashes.SHA256(),
        )
    except (InvalidSignature, ValueError):
        return False
    return True


class ArweaveSigner:
    """RSA-PSS signer for Arweave wallets.

    Usage:
        signer = ArweaveSigner.from_jwk(json.load(open("wallet.json")))
        item.sign(signer)
    """

    signature_type = SIG_ARWEAVE

    def __init__(self, private_key: Any) -> None:
        if private_key.key_size != ARWEAVE_KEY_BITS:
            raise ValueError(
                f"Arweave keys must be {ARWEAVE_KEY_BITS}-bit RSA, got {private_key.key_size}"
            )
        self._key = private_key
        modulus = private_key.public_key().public_numbers().n
        self.public_key = modulus.to_bytes(ARWEAVE_OWNER_LENGTH, "big")

    @classmethod
    def generate(cls) -> ArweaveSigner:
        _, _, _, rsa, _ = _import_cryptography()
        return cls(rsa.generate_private_key(
            public_exponent=ARWEAVE_PUBLIC_EXPONENT, key_size=ARWEAVE_KEY_BITS,
        ))

    @classmethod
    def from_jwk(cls, jwk: dict[str, str]) -> ArweaveSigner:
        """Load an Arweave JWK wallet (kty RSA with private components)."""
        _, _, _, rsa, _ = _import_cryptography()
        public = rsa.RSAPublicNumbers(_b64url_int(jwk["e"]), _b64url_int(jwk["n"]))
        private = rsa.RSAPrivateNumbers(
            p=_b64url_int(jwk["p"]),
            q=_b64url_int(jwk["q"]),
            d=_b64url_int(jwk["d"]),
            dmp1=_b64url_int(jwk["dp"]),
            dmq1=_b64url_int(jwk["dq"]),
            iqmp=_b64url_int(jwk["qi"]),
            public_numbers=public,
        )
        return cls(private.private_key())

    def to_jwk(self) -> dict[str, str]:
        numbers = self._key.private_numbers()
        return {
            "kty": "RSA",
            "n": _int_b64url(numbers.public_numbers.n),
            "e": _int_b64url(numbers.public_numbers.e),
            "d": _int_b64url(numbers.d),
            "p": _int_b64url(numbers.p),
            "q": _int_b64url(numbers.q),
            "dp": _int_b64url(numbers.dmp1),
            "dq": _int_b64url(numbers.dmq1),
            "qi": _int_b64url(numbers.iqmp),
        }

    def sign(self, message: bytes) -> bytes:
        _, hashes, padding, _, _ = _import_cryptography()
        return self._key.sign(
            bytes(message),
            padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=ARWEAVE_SALT_LENGTH),
            hashes.SHA256(),
        )


# --- Ed25519 ---

def verify_ed25519(owner: bytes, message: bytes, signature: bytes) -> bool:
    """Verify an Ed25519 signature against a raw 32-byte public key."""
    InvalidSignature, _, _, _, ed25519 = _import_cryptography()

    try:
        public_key = ed25519.Ed25519PublicKey.from_public_bytes(bytes(owner))
        public_key.verify(bytes(signature), bytes(message))
    except (InvalidSignature, ValueError):
        return False
    return True


class Ed25519Signer:
    """Ed25519 signer holding a raw private key."""

    signature_type = SIG_ED25519

    def __init__(self, private_key: Any) -> None:
        _, _, _, _, ed25519 = _import_cryptography()
        if not isinstance(private_key, ed25519.Ed25519PrivateKey):
            raise TypeError("Ed25519Signer requires an Ed25519PrivateKey")
        self._key = private_key
        self.public_key = _ed25519_public_bytes(private_key)

    @classmethod
    def generate(cls) -> Ed25519Signer:
        _, _, _, _, ed25519 = _import_cryptography()
        return cls(ed25519.Ed25519PrivateKey.generate())

    @classmethod
    def from_private_bytes(cls, seed: bytes) -> Ed25519Signer:
        """Load from the 32-byte private seed."""
        _, _, _, _, ed25519 = _import_cryptography()
        return cls(ed25519.Ed25519PrivateKey.from_private_bytes(bytes(seed)))

    @classmethod
    def from_jwk(cls, jwk: dict[str, str]) -> Ed25519Signer:
        """Load an OKP/Ed25519 JWK with its private ``d`` component."""
        if jwk.get("crv") != "Ed25519":
            raise ValueError(f"Unsupported OKP curve: {jwk.get('crv')!r}")
        return cls.from_private_bytes(b64url_decode(jwk["d"]))

    def to_jwk(self) -> dict[str, str]:
        from cryptography.hazmat.primitives import serialization

        seed = self._key.private_bytes(
            serialization.Encoding.Raw,
            serialization.PrivateFormat.Raw,
            serialization.NoEncryption(),
        )
        return {
            "kty": "OKP",
            "crv": "Ed25519",
            "x": b64url_encode(self.public_key),
            "d": b64url_encode(seed),
        }

    def sign(self, message: bytes) -> bytes:
        return self._key.sign(bytes(message))


def _ed25519_public_bytes(private_key: Any) -> bytes:
    from cryptography.hazmat.primitives import serialization

    return private_key.public_key().public_bytes(
        serialization.Encoding.Raw, serialization.PublicFormat.Raw,
    )


# --- wallet loading ---

def signer_from_jwk(jwk: dict[str, str]) -> ArweaveSigner | Ed25519Signer:
    """Pick the signer class from a JWK's ``kty``."""
    kty = jwk.get("kty")
    if kty == "RSA":
        return ArweaveSigner.from_jwk(jwk)
    if kty == "OKP":
        return Ed25519Signer.from_jwk(jwk)
    raise ValueError(f"Unsupported key type: {kty!r}")


def load_signer(path: str | Path) -> ArweaveSigner | Ed25519Signer:
    """Load a signer from a JWK wallet file.

    Raises:
        ValueError: If the file is missing, not JSON, or not a usable key.
    """
    path = Path(path)
    try:
        jwk = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(jwk, dict):
            raise ValueError("wallet must be a JSON object")
        return signer_from_jwk(jwk)
    except (OSError, json.JSONDecodeError, KeyError, ValueError) as e:
        log.warning("Failed to load wallet from %s: %s", path, e)
        raise ValueError(f"Cannot load wallet {path}: {e}") from e
