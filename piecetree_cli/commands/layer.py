"""
CLI Layer Command

Map a piece length to the Merkle tree layer it covers.

Usage:
    piecetree layer 4194304 [--json]
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace

from piecetree.merkle.piece_layers import calculate_layer_number


EXIT_SUCCESS = 0
EXIT_INVALID_LENGTH = 2


def layer_cmd(args: Namespace) -> int:
    """Handle layer command."""
    layer_number = calculate_layer_number(args.piece_length)

    if args.json:
        print(json.dumps({
            "piece_length": args.piece_length,
            "layer_number": layer_number,
            "valid": layer_number is not None,
        }, indent=2))
    elif layer_number is None:
        print(
            f"Error: {args.piece_length} is not 16 KiB times a power of two",
            file=sys.stderr,
        )
    else:
        print(layer_number)

    return EXIT_SUCCESS if layer_number is not None else EXIT_INVALID_LENGTH
