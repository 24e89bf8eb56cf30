from datetime import datetime

import pytest

from study_tracker.clock import FixedClock
from study_tracker.engine import StudyEngine
from study_tracker.storage import MemoryStore

T0 = datetime(2024, 1, 10, 9, 0, 0)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tracker.db")
    return db_path


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def engine(store, clock):
    return StudyEngine(store=store, clock=clock)
