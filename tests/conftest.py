"""
Pytest configuration and shared fixtures for JuryPack tests.

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

make_primary_document = _common.make_primary_document
make_jury_config = _common.make_jury_config
make_supporting_file = _common.make_supporting_file
make_external_reference = _common.make_external_reference
make_manifest_data = _common.make_manifest_data

FakeContentStore = _common.FakeContentStore
FakeLedger = _common.FakeLedger
RecordingSleep = _common.RecordingSleep


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def primary_document():
    """Provide a default PrimaryDocument for tests."""
    return make_primary_document()


@pytest.fixture
def jury_config():
    """Provide a two-node jury with equal weights."""
    return make_jury_config()


@pytest.fixture
def supporting_file():
    return make_supporting_file()


@pytest.fixture
def external_reference():
    return make_external_reference()


@pytest.fixture
def manifest_data():
    """Provide a valid manifest dictionary."""
    return make_manifest_data()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def fake_store():
    return FakeContentStore()


@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    """Run in an empty directory with no JURYPACK_/IPFS_ variables set."""
    import os
    for key in list(os.environ):
        if key.startswith("JURYPACK_") or key.startswith("IPFS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
