"""
Merkle Tree Implementation
BEP-0052 Merkle layer reduction and root validation.

related: BEP-0052 http://www.bittorrent.org/beps/bep_0052.html

This module provides:
- Leaf block hashing with a zero sentinel for empty blocks
- Reduction of one layer into the next
- Reduction of a layer to a higher layer or to the root
- Validation of a layer against an expected root

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = sha256(block), block <= 16 KiB
2. Empty leaf: 32 zero bytes
3. Parent hashing: parent = sha256(left + right)
4. Padding rule: an unpaired node at layer L is paired with empty(L)
5. Layer 0 holds the leaf hashes; layer L + 1 is the parent of layer L

A layer needs to know how much data it represents, so it carries its layer
number. That lets trailing hashes which represent no data be left out.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from piecetree.crypto.hashing import DIGEST_SIZE, HashPrimitive, get_default_primitive
from piecetree.merkle.empty_hashes import (
    EMPTY_MERKLE_HASH,
    EmptyHashCache,
    get_default_empty_hash_cache,
)
from piecetree.schemas.errors import (
    EmptyLayerException,
    HashPrimitiveException,
    LayerBoundExceededException,
    LayerOrderException,
    PieceTreeException,
    ReductionException,
)


logger = logging.getLogger(__name__)


# Leaf block size: 16 KiB
BLOCK_SIZE: int = 16 * 1024

# Upper bound on root reduction, guards against looping forever.
# 16 KiB * 2**MAX_LAYER is far beyond any piece length we accept.
MAX_LAYER: int = 100


@dataclass(frozen=True)
class MerkleLayer:
    """
    One horizontal slice of a Merkle tree.

    Attributes:
        layer_number: 0 for leaf hashes, L + 1 for the parents of layer L
        hashes: Ordered digests at this layer. An empty tuple is an
                empty tree, not an error.
    """
    layer_number: int
    hashes: tuple[bytes, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate layer structure."""
        if self.layer_number < 0:
            raise ValueError(f"Layer number must be non-negative, got {self.layer_number}")
        object.__setattr__(self, "hashes", tuple(self.hashes))

    def __len__(self) -> int:
        return len(self.hashes)


def _resolve(
    cache: Optional[EmptyHashCache],
    primitive: Optional[HashPrimitive],
) -> tuple[EmptyHashCache, HashPrimitive]:
    """
    Fill in defaults for a cache/primitive pair.

    Without an explicit cache, padding must come from the same primitive
    that hashes the pairs, so a custom primitive gets its own cache.
    """
    if cache is None:
        if primitive is None:
            cache = get_default_empty_hash_cache()
        else:
            cache = EmptyHashCache(primitive)
    return cache, primitive if primitive is not None else get_default_primitive()


def hash_block(block: bytes, primitive: Optional[HashPrimitive] = None) -> bytes:
    """
    Hash a single leaf block.

    An empty block is padding and maps to the zero hash; it is not
    sha256(b"").

    Args:
        block: Leaf data, at most BLOCK_SIZE bytes
        primitive: Hash primitive (defaults to SHA-256)

    Returns:
        32-byte leaf hash

    Raises:
        ValueError: If the block is larger than BLOCK_SIZE
    """
    length = len(block)
    if length == 0:
        return EMPTY_MERKLE_HASH
    if length > BLOCK_SIZE:
        raise ValueError(f"Leaf block must be at most {BLOCK_SIZE} bytes, got {length}")
    primitive = primitive if primitive is not None else get_default_primitive()
    return primitive.hash_single(block)


def hash_blocks(data: bytes, primitive: Optional[HashPrimitive] = None) -> list[bytes]:
    """
    Split data into 16 KiB blocks and hash each one.

    The final block may be short. Empty data yields no leaves.
    """
    view = memoryview(data)
    return [
        hash_block(view[i:i + BLOCK_SIZE], primitive)
        for i in range(0, len(view), BLOCK_SIZE)
    ]


def reduce_layer(
    layer_number: int,
    hashes: Sequence[bytes],
    *,
    cache: Optional[EmptyHashCache] = None,
    primitive: Optional[HashPrimitive] = None,
) -> list[bytes]:
    """
    Generate the next layer of Merkle hashes.

    Pairs are hashed left to right. When the count is odd, the last hash
    is paired with the empty-subtree hash for this layer.

    Example: [a, b, c] at layer L -> [parent(a, b), parent(c, empty(L))]

    Args:
        layer_number: Layer the input hashes belong to
        hashes: Ordered digests at that layer
        cache: Empty hash cache (defaults to one built with primitive,
               or the process-wide SHA-256 cache)
        primitive: Hash primitive (defaults to SHA-256)

    Returns:
        ceil(len(hashes) / 2) digests for layer_number + 1

    Raises:
        ReductionException: If any pair hash fails
    """
    cache, primitive = _resolve(cache, primitive)

    out: list[bytes] = []
    for i in range(0, len(hashes), 2):
        left = hashes[i]
        try:
            right = hashes[i + 1] if i + 1 < len(hashes) else cache.get(layer_number)
            out.append(primitive.hash_pair(left, right))
        except HashPrimitiveException as e:
            raise ReductionException(
                f"Failed to hash pair {i // 2} at layer {layer_number}: {e.message}",
                layer_number=layer_number,
                details={"pair_index": i // 2, "cause": e.code},
            ) from e
    return out


def reduce_to_layer(
    target_layer: int,
    layer: MerkleLayer,
    *,
    cache: Optional[EmptyHashCache] = None,
    primitive: Optional[HashPrimitive] = None,
) -> MerkleLayer:
    """
    Reduce a layer of the Merkle tree to a higher layer.

    Args:
        target_layer: Layer number to stop at
        layer: Starting layer

    Returns:
        MerkleLayer at target_layer (the input itself if already there)

    Raises:
        LayerOrderException: If target_layer is below layer.layer_number
        ReductionException: If a pair hash fails
    """
    if target_layer < layer.layer_number:
        raise LayerOrderException(
            f"Cannot reduce layer {layer.layer_number} down to layer {target_layer}",
            current_layer=layer.layer_number,
            target_layer=target_layer,
        )

    if target_layer == layer.layer_number:
        return layer

    cache, primitive = _resolve(cache, primitive)
    hashes: Sequence[bytes] = layer.hashes
    for current in range(layer.layer_number, target_layer):
        hashes = reduce_layer(current, hashes, cache=cache, primitive=primitive)
    return MerkleLayer(layer_number=target_layer, hashes=tuple(hashes))


def reduce_to_root(
    layer: MerkleLayer,
    *,
    max_layer: int = MAX_LAYER,
    cache: Optional[EmptyHashCache] = None,
    primitive: Optional[HashPrimitive] = None,
) -> bytes:
    """
    Reduce a layer of the Merkle tree all the way to the root hash.

    Reduction stops once a single digest remains or max_layer is reached.

    Returns:
        32-byte root of the tree

    Raises:
        EmptyLayerException: If the layer holds no hashes
        LayerBoundExceededException: If more than one digest remains at max_layer
        ReductionException: If a pair hash fails
    """
    if not layer.hashes:
        raise EmptyLayerException(
            f"Layer {layer.layer_number} has no hashes to reduce",
            layer_number=layer.layer_number,
        )

    cache, primitive = _resolve(cache, primitive)
    hashes: Sequence[bytes] = layer.hashes
    current = layer.layer_number
    while current < max_layer and len(hashes) > 1:
        hashes = reduce_layer(current, hashes, cache=cache, primitive=primitive)
        current += 1

    if len(hashes) != 1:
        raise LayerBoundExceededException(
            f"{len(hashes)} hashes remain at layer {current}, bound is {max_layer}",
            max_layer=max_layer,
            remaining=len(hashes),
        )
    return hashes[0]


def validate_piece_layers(
    root: bytes,
    layer: MerkleLayer,
    *,
    max_layer: int = MAX_LAYER,
    cache: Optional[EmptyHashCache] = None,
    primitive: Optional[HashPrimitive] = None,
) -> bool:
    """
    Check that a layer reduces to the expected root.

    Any reduction failure counts as a mismatch.

    Args:
        root: Expected 32-byte root
        layer: Layer to reduce

    Returns:
        True if the computed root equals root byte-for-byte
    """
    if len(root) != DIGEST_SIZE:
        logger.warning("Expected root is %d bytes, not %d", len(root), DIGEST_SIZE)
        return False

    try:
        found_root = reduce_to_root(
            layer, max_layer=max_layer, cache=cache, primitive=primitive
        )
    except PieceTreeException as e:
        logger.warning("Piece layer validation failed: %s (%s)", e.message, e.code)
        return False

    if found_root != root:
        logger.debug(
            "Root mismatch: expected %s, computed %s", root.hex(), found_root.hex()
        )
        return False
    return True


__all__ = [
    "BLOCK_SIZE",
    "MAX_LAYER",
    "MerkleLayer",
    "hash_block",
    "hash_blocks",
    "reduce_layer",
    "reduce_to_layer",
    "reduce_to_root",
    "validate_piece_layers",
]
