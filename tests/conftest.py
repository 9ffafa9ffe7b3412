# tests/conftest.py

"""
Shared fixtures.

Settings are read from the environment when ledger_recon.main is imported,
so placeholder Supabase credentials are set before any test module loads.
"""

import os

import pytest

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

from tests.helpers.store import InMemoryImportHistory, InMemoryTransactionStore  # noqa: E402


@pytest.fixture
def store() -> InMemoryTransactionStore:
    return InMemoryTransactionStore()


@pytest.fixture
def history() -> InMemoryImportHistory:
    return InMemoryImportHistory()
