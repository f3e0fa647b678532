import pytest

from study_tracker.clock import FixedClock
from study_tracker.db import init_db
from study_tracker.timetable import Timetable

# 2026-10-19 is a Monday
TEST_DAYS = {
    "Monday": [
        {"start": "08:00", "end": "09:00", "subject": "Math"},
        {"start": "09:00", "end": "10:00", "subject": "DSA"},
    ],
    "Tuesday": [
        {"start": "10:00", "end": "11:30", "subject": "System Design: Basics"},
    ],
    "Wednesday": [
        {"start": "10:00", "end": "10:30", "subject": "System Design (Networking)"},
    ],
    "Sunday": [],
}


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tracker.db")
    return db_path


@pytest.fixture
def ready_db(tmp_db):
    init_db(tmp_db)
    return tmp_db


@pytest.fixture
def timetable():
    return Timetable(TEST_DAYS)


@pytest.fixture
def clock():
    return FixedClock("2026-10-19T09:30:00")
