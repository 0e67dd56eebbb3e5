"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from cowmap import BorrowScope, CowMap, CowMapSettings


@pytest.fixture
def scope():
    """Open borrow scope, closed after the test."""
    with BorrowScope("test") as s:
        yield s


@pytest.fixture
def settings():
    """Default settings, ignoring any .env file."""
    return CowMapSettings(_env_file=None)


@pytest.fixture
def cow_map(settings):
    """Fresh empty CowMap."""
    return CowMap(settings=settings)
