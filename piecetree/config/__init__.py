"""
Runtime Configuration Module

Provides configuration loading and management for piecetree.
"""

from .runtime import (
    LoggingConfig,
    MerkleConfig,
    RuntimeConfig,
    get_default_config,
    load_config,
    set_default_config,
)

__all__ = [
    "RuntimeConfig",
    "MerkleConfig",
    "LoggingConfig",
    "load_config",
    "get_default_config",
    "set_default_config",
]
