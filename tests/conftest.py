"""Pytest configuration for path setup.

Makes the repository root and the shared ``helpers`` package under ``tests``
importable however pytest is invoked.
"""

import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent

for path in (str(ROOT), str(TESTS_DIR)):
    if path not in sys.path:
        sys.path.insert(0, path)

from helpers.fake_chain import FakeLogTransport, FakeRpcClient  # noqa: E402


@pytest.fixture
def fake_transport():
    return FakeLogTransport()


@pytest.fixture
def fake_rpc():
    return FakeRpcClient()
