"""
Core cryptographic utilities.

Provides the SHA-256 hash primitive and digest codecs.
"""
from .hashing import (
    DIGEST_SIZE,
    HashPrimitive,
    Sha256Primitive,
    get_default_primitive,
    sha256,
    hash_concat,
    to_hex,
    b64decode,
)

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
