"""
Pytest configuration and shared fixtures for canopy tests.

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

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

import importlib

_words = importlib.import_module("fixtures.words")

Word = _words.Word
GREEK = _words.GREEK
make_words = _words.make_words


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def words():
    """All 24 Greek words as Word items, in supply order."""
    return make_words()


@pytest.fixture
def greek_tree(words):
    """A SHA-256 tree over the 24 Greek words."""
    from canopy.merkle import build_tree
    return build_tree("sha256", words)


@pytest.fixture(autouse=True)
def _reset_default_config():
    """Keep the process-wide default config from leaking between tests."""
    from canopy.config import set_default_config
    set_default_config(None)
    yield
    set_default_config(None)


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
