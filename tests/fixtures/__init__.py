"""
Test fixtures package for piecetree tests.

- piece_layers.py: BEP-0052 test vectors, digest/data factories, failing primitive

Usage:
    from fixtures import VALID_PIECE_LAYERS, decode_entry

    def test_something():
        key, value = decode_entry(*VALID_PIECE_LAYERS[0])
"""

from .piece_layers import (
    EMPTY_HASH_LAYER_1,
    EMPTY_HASH_LAYER_7,
    MALFORMED_PIECE_LAYERS,
    PIECE_LAYER_4MIB,
    PIECE_LENGTH_4MIB,
    TAMPERED_PIECE_LAYERS,
    VALID_PIECE_LAYERS,
    Blake2bPrimitive,
    FailingPrimitive,
    decode_entry,
    make_cache,
    make_digests,
    make_file_data,
)

__all__ = [
    "EMPTY_HASH_LAYER_1",
    "EMPTY_HASH_LAYER_7",
    "MALFORMED_PIECE_LAYERS",
    "PIECE_LAYER_4MIB",
    "PIECE_LENGTH_4MIB",
    "TAMPERED_PIECE_LAYERS",
    "VALID_PIECE_LAYERS",
    "Blake2bPrimitive",
    "FailingPrimitive",
    "decode_entry",
    "make_cache",
    "make_digests",
    "make_file_data",
]
