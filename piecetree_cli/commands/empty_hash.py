"""
CLI Empty Hash Command

Print the hash of an empty subtree at a given layer.

Usage:
    piecetree empty-hash 7 [--json]
"""

from __future__ import annotations

import json
from argparse import Namespace

from piecetree.merkle.empty_hashes import merkle_empty_hash


EXIT_SUCCESS = 0


def empty_hash_cmd(args: Namespace) -> int:
    """Handle empty-hash command."""
    digest = merkle_empty_hash(args.layer)

    if args.json:
        print(json.dumps({"layer": args.layer, "hash": digest.hex()}, indent=2))
    else:
        print(digest.hex())
    return EXIT_SUCCESS
