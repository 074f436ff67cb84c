"""
piecetree

BEP-0052 Merkle tree hashing and piece layer validation.
"""

__version__ = "0.1.0"
