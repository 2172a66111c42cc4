import random
from datetime import datetime, timedelta

import pytest

from unit_tutor.db import MemoryStore
from unit_tutor.progress import ProgressTracker
from unit_tutor.scheduler import EventQueue


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def scheduler():
    return EventQueue()


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 10, 9, 30))


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def tracker(store, clock):
    t = ProgressTracker(store, clock=clock)
    t.load()
    return t
