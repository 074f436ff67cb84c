"""
piecetree CLI

Command-line interface for BEP-0052 Merkle validation.

Usage:
    python -m piecetree_cli verify layers.yaml
    python -m piecetree_cli layer 4194304
    python -m piecetree_cli empty-hash 7
"""

__version__ = "0.1.0"
