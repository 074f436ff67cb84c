"""
Pytest configuration and shared fixtures for piecetree tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_piece_layers = importlib.import_module("fixtures.piece_layers")

FailingPrimitive = _piece_layers.FailingPrimitive
make_cache = _piece_layers.make_cache
make_digests = _piece_layers.make_digests


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def cache():
    """Provide an isolated EmptyHashCache."""
    return make_cache()


@pytest.fixture
def digests():
    """Provide five distinct 32-byte digests."""
    return make_digests(5)


@pytest.fixture
def failing_primitive():
    """Provide a primitive whose hash_pair always fails."""
    return FailingPrimitive(fail_after=0)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep PIECETREE_* variables from the host out of the tests."""
    for name in ("PIECETREE_MAX_LAYER", "PIECETREE_LOG_LEVEL", "PIECETREE_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
