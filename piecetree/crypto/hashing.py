"""
Hashing Utilities
SHA-256 hash primitive and digest text codecs for BEP-0052 Merkle trees.

This module provides:
- HashPrimitive: protocol for the single-buffer and pair hash used by the trees
- Sha256Primitive: the default hashlib-backed implementation
- 0x-prefixed hex encoding for reports
- Base64 decoding for piece layers documents

Security/Determinism Notes:
- Always hash raw bytes exactly as given
- hash_pair(a, b) hashes a then b; argument order is never swapped
- Digest width is fixed at 32 bytes
"""
from __future__ import annotations

import base64
import binascii
import hashlib
from typing import Protocol, runtime_checkable

from piecetree.schemas.errors import HashPrimitiveException


# SHA-256 output width in bytes
DIGEST_SIZE: int = 32


@runtime_checkable
class HashPrimitive(Protocol):
    """Hash functions consumed by the Merkle tree code."""

    def hash_single(self, data: bytes) -> bytes:
        ...

    def hash_pair(self, left: bytes, right: bytes) -> bytes:
        ...


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_concat(left: bytes, right: bytes) -> bytes:
    """
    Hash the concatenation of two byte sequences.

    This is the Merkle parent rule: parent = sha256(left + right)

    Args:
        left: Left child hash
        right: Right child hash

    Returns:
        32-byte SHA-256 digest of concatenation
    """
    return sha256(left + right)


class Sha256Primitive:
    """
    SHA-256 implementation of HashPrimitive.

    hash_pair only accepts full-width digests; anything else is a
    HashPrimitiveException rather than a silently computed hash.
    """

    name = "sha256"
    digest_size = DIGEST_SIZE

    def hash_single(self, data: bytes) -> bytes:
        return sha256(bytes(data))

    def hash_pair(self, left: bytes, right: bytes) -> bytes:
        for side, digest in (("left", left), ("right", right)):
            if len(digest) != DIGEST_SIZE:
                raise HashPrimitiveException(
                    f"{side} digest must be {DIGEST_SIZE} bytes, got {len(digest)}",
                    details={"side": side, "length": len(digest)},
                )
        return hash_concat(bytes(left), bytes(right))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


_default_primitive = Sha256Primitive()


def get_default_primitive() -> HashPrimitive:
    """Get the process-wide SHA-256 primitive."""
    return _default_primitive


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def b64decode(text: str | bytes) -> bytes:
    """
    Decode standard base64 text.

    Raises:
        ValueError: If the text is not valid base64
    """
    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 data: {e}") from e


__all__ = [
    "DIGEST_SIZE",
    "HashPrimitive",
    "Sha256Primitive",
    "get_default_primitive",
    "sha256",
    "hash_concat",
    "to_hex",
    "b64decode",
]
