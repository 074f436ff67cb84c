"""
Piece Layers
Parsing of "piece layers" entries and piece length to layer mapping.

A "piece layers" entry maps a file's Merkle root to the concatenated
hashes of the tree layer whose nodes each cover one piece. The piece
length decides which layer that is: 16 KiB pieces are the leaves
(layer 0), 32 KiB pieces are layer 1, and so on.

No hashing happens while parsing; it is purely structural.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from piecetree.crypto.hashing import DIGEST_SIZE, HashPrimitive
from piecetree.merkle.empty_hashes import EmptyHashCache
from piecetree.merkle.merkle_tree import (
    BLOCK_SIZE,
    MerkleLayer,
    hash_blocks,
    reduce_to_layer,
    reduce_to_root,
)
from piecetree.schemas.errors import PieceLayersParseException


logger = logging.getLogger(__name__)


# Largest value a signed 64-bit piece length can hold
INT64_MAX: int = 2**63 - 1

# Probe widths for locating the layer exponent. They sum to 48, so the
# largest shifted value is BLOCK_SIZE << 48 == 2**62, still inside int64.
_LAYER_PROBES: tuple[int, ...] = (17, 16, 8, 4, 2, 1)


@dataclass(frozen=True)
class PieceLayersEntry:
    """
    One parsed piece layers entry.

    Attributes:
        root: Expected Merkle root of the file (32 bytes)
        hashes: Digests at the piece layer, in order
    """
    root: bytes
    hashes: tuple[bytes, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "hashes", tuple(self.hashes))

    def to_layer(self, layer_number: int) -> MerkleLayer:
        """Attach a layer number to the piece hashes."""
        return MerkleLayer(layer_number=layer_number, hashes=self.hashes)


def parse_piece_layers_entry(key: bytes, value: bytes) -> Optional[PieceLayersEntry]:
    """
    Parse the raw key and value of a piece layers entry.

    Args:
        key: Merkle root, must be exactly one digest wide
        value: Concatenated piece hashes, a whole number of digests

    Returns:
        PieceLayersEntry, or None if either buffer has the wrong size
    """
    if len(key) != DIGEST_SIZE or len(value) % DIGEST_SIZE != 0:
        return None

    value = bytes(value)
    hashes = tuple(
        value[i:i + DIGEST_SIZE] for i in range(0, len(value), DIGEST_SIZE)
    )
    return PieceLayersEntry(root=bytes(key), hashes=hashes)


def parse_piece_layers(layers: Mapping[bytes, bytes]) -> dict[bytes, PieceLayersEntry]:
    """
    Parse a whole piece layers dictionary.

    Raises:
        PieceLayersParseException: On the first malformed entry. A
            malformed dictionary is rejected as a whole.
    """
    entries: dict[bytes, PieceLayersEntry] = {}
    for key, value in layers.items():
        entry = parse_piece_layers_entry(key, value)
        if entry is None:
            raise PieceLayersParseException(
                "Malformed piece layers entry",
                key_length=len(key),
                value_length=len(value),
            )
        entries[entry.root] = entry
    logger.debug("Parsed %d piece layers entries", len(entries))
    return entries


def calculate_layer_number(piece_length: int) -> Optional[int]:
    """
    Find which layer in the Merkle tree a piece length corresponds to.

    Valid piece lengths are BLOCK_SIZE * 2**k that fit a signed 64-bit
    integer. The exponent is located by additive probing so that no
    intermediate value leaves the int64 range.

    Args:
        piece_length: Piece length in bytes

    Returns:
        The layer number k, or None if the length is invalid

    Example:
        >>> calculate_layer_number(4 * 1024 * 1024)
        8
        >>> calculate_layer_number(8 * 1024) is None
        True
    """
    if isinstance(piece_length, bool) or not isinstance(piece_length, int):
        return None
    if piece_length < BLOCK_SIZE or piece_length > INT64_MAX:
        return None

    offset = 0
    for probe in _LAYER_PROBES:
        if (BLOCK_SIZE << (probe + offset)) <= piece_length:
            offset += probe

    if (BLOCK_SIZE << offset) == piece_length:
        return offset
    # not a power of 2 below 2**63 (8 EiB)
    return None


def build_piece_layer(
    data: bytes,
    piece_length: int,
    *,
    cache: Optional[EmptyHashCache] = None,
    primitive: Optional[HashPrimitive] = None,
) -> PieceLayersEntry:
    """
    Compute the root and piece layer hashes of in-memory data.

    Args:
        data: File contents
        piece_length: Piece length, a power of two of at least 16 KiB

    Returns:
        PieceLayersEntry with the file root and its piece layer

    Raises:
        ValueError: If data is empty or piece_length is invalid
    """
    layer_number = calculate_layer_number(piece_length)
    if layer_number is None:
        raise ValueError(f"Invalid piece length: {piece_length}")

    leaves = hash_blocks(data, primitive)
    if not leaves:
        raise ValueError("Cannot build a piece layer for empty data")

    if cache is None and primitive is not None:
        cache = EmptyHashCache(primitive)
    piece_layer = reduce_to_layer(
        layer_number,
        MerkleLayer(layer_number=0, hashes=tuple(leaves)),
        cache=cache,
        primitive=primitive,
    )
    root = reduce_to_root(piece_layer, cache=cache, primitive=primitive)
    return PieceLayersEntry(root=root, hashes=piece_layer.hashes)


__all__ = [
    "INT64_MAX",
    "PieceLayersEntry",
    "parse_piece_layers_entry",
    "parse_piece_layers",
    "calculate_layer_number",
    "build_piece_layer",
]
