"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally, and provide adapter
and registry fixtures shared by the unit and backend tests.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def counting_adapter():
    from tests.helpers import CountingAdapter
    return CountingAdapter()


@pytest.fixture
def registry(counting_adapter):
    from prefstore_lib.registry import NamespaceRegistry
    return NamespaceRegistry(counting_adapter)
