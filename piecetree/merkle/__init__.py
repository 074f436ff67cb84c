"""
Merkle Trees for BEP-0052 piece layers.

This module provides:
- EmptyHashCache: memoized empty-subtree hashes per layer
- hash_block: leaf hashing with a zero sentinel for empty blocks
- reduce_layer / reduce_to_layer / reduce_to_root: layer reduction
- validate_piece_layers: compare a layer against an expected root
- parse_piece_layers_entry: split a raw entry into root and hashes
- calculate_layer_number: map a piece length to its tree layer
- PieceLayersVerifier: end-to-end verification with structured results

Usage:
    from piecetree.merkle import (
        calculate_layer_number,
        parse_piece_layers_entry,
        validate_piece_layers,
    )

    entry = parse_piece_layers_entry(key, value)
    layer = entry.to_layer(calculate_layer_number(piece_length))
    assert validate_piece_layers(entry.root, layer)
"""
from .empty_hashes import (
    EMPTY_MERKLE_HASH,
    EmptyHashCache,
    get_default_empty_hash_cache,
    merkle_empty_hash,
)

from .merkle_tree import (
    BLOCK_SIZE,
    MAX_LAYER,
    MerkleLayer,
    hash_block,
    hash_blocks,
    reduce_layer,
    reduce_to_layer,
    reduce_to_root,
    validate_piece_layers,
)

from .piece_layers import (
    INT64_MAX,
    PieceLayersEntry,
    build_piece_layer,
    calculate_layer_number,
    parse_piece_layers,
    parse_piece_layers_entry,
)

from .verifier import PieceLayersVerifier


__all__ = [
    # Constants
    "EMPTY_MERKLE_HASH",
    "BLOCK_SIZE",
    "MAX_LAYER",
    "INT64_MAX",
    # Types
    "MerkleLayer",
    "PieceLayersEntry",
    "EmptyHashCache",
    # Functions
    "get_default_empty_hash_cache",
    "merkle_empty_hash",
    "hash_block",
    "hash_blocks",
    "reduce_layer",
    "reduce_to_layer",
    "reduce_to_root",
    "validate_piece_layers",
    "parse_piece_layers_entry",
    "parse_piece_layers",
    "calculate_layer_number",
    "build_piece_layer",
    # Convenience classes
    "PieceLayersVerifier",
]
