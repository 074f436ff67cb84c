"""
Runtime Configuration

Central configuration for Merkle validation limits and logging.
"""

from __future__ import annotations

import copy
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


# Environment variable prefix
ENV_PREFIX = "PIECETREE_"


@dataclass
class MerkleConfig:
    """Configuration for tree reduction."""
    max_layer: int = 100

    def __post_init__(self):
        if self.max_layer < 1:
            raise ValueError(f"max_layer must be positive, got {self.max_layer}")


@dataclass
class LoggingConfig:
    """Configuration for log output."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    merkle: MerkleConfig = field(default_factory=MerkleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - PIECETREE_MAX_LAYER: Root reduction bound
        - PIECETREE_LOG_LEVEL: Log level
        - PIECETREE_LOG_FILE: Log file path
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}MAX_LAYER"):
            overrides.setdefault("merkle", {})["max_layer"] = int(
                os.getenv(f"{ENV_PREFIX}MAX_LAYER", "100")
            )

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        merkle_data = data.get("merkle", {})
        logging_data = data.get("logging", {})

        merkle = MerkleConfig(**merkle_data) if merkle_data else MerkleConfig()
        logging_config = LoggingConfig(**logging_data) if logging_data else LoggingConfig()

        return cls(
            merkle=merkle,
            logging=logging_config,
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)

        if "merkle" in overrides:
            new_config.merkle = MerkleConfig(
                **{**asdict(new_config.merkle), **overrides["merkle"]}
            )

        if "logging" in overrides:
            new_config.logging = LoggingConfig(
                **{**asdict(new_config.logging), **overrides["logging"]}
            )

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "merkle": {
                "max_layer": self.merkle.max_layer,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "extra": self.extra,
        }


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings. Without an explicit
    path, ./piecetree.yaml and ~/.config/piecetree/config.yaml are tried.
    """
    if config_path is not None:
        return RuntimeConfig.from_yaml(config_path).with_env_overrides()

    default_paths = [
        Path.cwd() / "piecetree.yaml",
        Path.home() / ".config" / "piecetree" / "config.yaml",
    ]
    for default_path in default_paths:
        if default_path.exists():
            return RuntimeConfig.from_yaml(default_path).with_env_overrides()

    return RuntimeConfig.from_env()


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
