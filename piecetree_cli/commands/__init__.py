"""
CLI command modules.
"""

from piecetree_cli.commands import empty_hash, layer, verify

__all__ = ["empty_hash", "layer", "verify"]
