"""
conftest.py - Shared pytest fixtures for bookstore tests

Provides:
- In-memory stores (seeded with root) and engines over them
- Engines already logged in as root or as a clerk
- A file-backed engine rooted in tmp_path
"""

import pytest
from bookstore import Engine, FileRecordStore, StoreConfig

from tests.fake_store import MemoryRecordStore, seeded_store
from tests.helpers import assert_applied


# =============================================================================
# STORE AND ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def store() -> MemoryRecordStore:
    """Fresh in-memory store containing only the root account."""
    return seeded_store()


@pytest.fixture
def engine(store) -> Engine:
    """Engine with nobody logged in."""
    return Engine(store, verbose=False)


@pytest.fixture
def root_engine(engine) -> Engine:
    """Engine with root logged in."""
    assert_applied(engine, "su root sjtu")
    return engine


@pytest.fixture
def clerk_engine(root_engine) -> Engine:
    """Engine with root, then clerk (privilege 3) logged in on top."""
    assert_applied(root_engine, "useradd clerk cpw 3 Clerk")
    assert_applied(root_engine, "su clerk cpw")
    return root_engine


@pytest.fixture
def stocked_engine(root_engine) -> Engine:
    """
    Root engine with three books:
        B2  'Beta'   by Bob    tags fiction|classic  price 12.50  stock 4
        A1  'Alpha'  by Ann    tags fiction          price 5.00   stock 10
        C3  'Gamma'  by Ann    tags science          price 0.99   stock 0
    Selection is left on C3.
    """
    for line in [
        "select B2", 'modify -name="Beta" -author=Bob -keyword="fiction|classic" -price=12.50',
        "import 4 20",
        "select A1", "modify -name=Alpha -author=Ann -keyword=fiction -price=5",
        "import 10 30.00",
        "select C3", "modify -name=Gamma -author=Ann -keyword=science -price=0.99",
    ]:
        assert_applied(root_engine, line)
    return root_engine


@pytest.fixture
def file_config(tmp_path) -> StoreConfig:
    return StoreConfig(data_dir=tmp_path / "data")


@pytest.fixture
def file_store(file_config) -> FileRecordStore:
    store = FileRecordStore(file_config)
    store.initialize()
    return store


@pytest.fixture
def file_engine(file_store) -> Engine:
    return Engine(file_store, verbose=False)
