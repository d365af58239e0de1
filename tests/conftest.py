"""
Pytest configuration and shared fixtures for the grid_stencils test suite.

This module provides common fixtures, test configuration, and utilities
used across the entire test suite.
"""

import pytest

import numpy as np

from grid_stencils import moore, von_neumann
from grid_stencils.config import create_fast_config, create_serial_config

# =============================================================================
# Test Configuration
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (slower, cross-component)")
    config.addinivalue_line("markers", "mathematical: Mathematical property validation tests")
    config.addinivalue_line("markers", "slow: Slow tests (may take >10 seconds)")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on test paths."""
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/mathematical/" in test_path:
            item.add_marker(pytest.mark.mathematical)

        if "large" in item.name or "slow" in item.name:
            item.add_marker(pytest.mark.slow)


# =============================================================================
# Grid Fixtures
# =============================================================================


@pytest.fixture
def grid_4x4():
    """4x4 grid holding row * column (zero-based)."""
    rows, cols = np.indices((4, 4))
    return (rows * cols).astype(float)


@pytest.fixture
def grid_10x10():
    """10x10 grid holding 0..99 in C order."""
    return np.arange(100).reshape(10, 10)


@pytest.fixture
def random_grid():
    """Reproducible random 12x9 grid."""
    rng = np.random.default_rng(42)
    return rng.random((12, 9))


# =============================================================================
# Stencil Fixtures
# =============================================================================


@pytest.fixture
def moore1():
    return moore(1)


@pytest.fixture
def von_neumann1():
    return von_neumann(1)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def serial_config():
    """Single-threaded configuration without the kernel fast path."""
    return create_serial_config()


@pytest.fixture
def fast_config():
    """Four threads with the kernel fast path."""
    return create_fast_config(n_workers=4)
