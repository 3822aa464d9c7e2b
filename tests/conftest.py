"""
Pytest configuration and shared fixtures for sum tree tests.

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

_common = importlib.import_module("fixtures.common")

make_leaves = _common.make_leaves
make_tree = _common.make_tree
sha_pair_hasher = _common.sha_pair_hasher
snapshot_tree = _common.snapshot_tree


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def leaves():
    """Four account leaves with distinct values."""
    return make_leaves()


@pytest.fixture
def tree():
    """A full 4-leaf tree hashed with the default MiMC sponge."""
    return make_tree()


@pytest.fixture
def fast_hasher():
    """Cheap sha256-based pair hash for mutation-heavy tests."""
    return sha_pair_hasher()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove SUMTREE_* variables so config tests see defaults."""
    import os
    for key in list(os.environ):
        if key.startswith("SUMTREE_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


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
