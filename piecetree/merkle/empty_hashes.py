"""
Empty Subtree Hashes
Memoized hashes of fully empty Merkle subtrees, one per layer.

Rules:
1. empty(0) is 32 zero bytes (the padding leaf, not sha256(b""))
2. empty(n) = hash_pair(empty(n - 1), empty(n - 1))

The table only grows. Extension happens one layer at a time under a lock;
reads of already memoized layers do not take the lock.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from piecetree.crypto.hashing import DIGEST_SIZE, HashPrimitive, get_default_primitive


logger = logging.getLogger(__name__)


# The empty merkle tree hash is all zeros
EMPTY_MERKLE_HASH: bytes = bytes(DIGEST_SIZE)


class EmptyHashCache:
    """
    Append-only table of empty-subtree digests indexed by layer number.

    Example:
        >>> cache = EmptyHashCache()
        >>> cache.get(0) == EMPTY_MERKLE_HASH
        True
        >>> cache.get(1).hex()[:8]
        'f5a5fd42'
    """

    def __init__(self, primitive: Optional[HashPrimitive] = None) -> None:
        self._primitive = primitive or get_default_primitive()
        self._hashes: list[bytes] = [EMPTY_MERKLE_HASH]
        self._lock = threading.Lock()

    @property
    def primitive(self) -> HashPrimitive:
        """Primitive the empty digests are computed with."""
        return self._primitive

    def get(self, layer: int) -> bytes:
        """
        Return the digest of an empty subtree spanning `layer` levels.

        Raises:
            ValueError: If layer is negative
            HashPrimitiveException: If the primitive fails while extending;
                nothing is recorded for the failed layer
        """
        if layer < 0:
            raise ValueError(f"Layer must be non-negative, got {layer}")

        # list.append is atomic, so a memoized entry is always fully written
        if layer < len(self._hashes):
            return self._hashes[layer]

        with self._lock:
            while layer >= len(self._hashes):
                previous = self._hashes[-1]
                digest = self._primitive.hash_pair(previous, previous)
                self._hashes.append(digest)
            logger.debug("Extended empty hash table to %d layers", len(self._hashes))
            return self._hashes[layer]

    def __len__(self) -> int:
        return len(self._hashes)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(layers={len(self._hashes)})"


_default_cache: Optional[EmptyHashCache] = None
_default_cache_lock = threading.Lock()


def get_default_empty_hash_cache() -> EmptyHashCache:
    """Get the process-wide empty hash cache."""
    global _default_cache
    if _default_cache is None:
        with _default_cache_lock:
            if _default_cache is None:
                _default_cache = EmptyHashCache()
    return _default_cache


def merkle_empty_hash(layer: int) -> bytes:
    """Hash representing a subtree with no data at the given layer."""
    return get_default_empty_hash_cache().get(layer)


__all__ = [
    "EMPTY_MERKLE_HASH",
    "EmptyHashCache",
    "get_default_empty_hash_cache",
    "merkle_empty_hash",
]
