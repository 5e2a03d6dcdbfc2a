"""
Pytest configuration and shared fixtures.
"""

import sys
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

import pytest
from faker import Faker

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cronmeetcal.core.config import load_settings
from cronmeetcal.models.meetings import RunContext
from cronmeetcal.services.event_log import EventLog

TODAY = date(2025, 11, 7)  # a Friday
DATE_STRING = "2025-11-07"


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================


class FakeCalendarSource:
    """In-memory calendar source."""

    def __init__(self, agenda="", calendars=None, holiday_agendas=None, available=True):
        self.agenda = agenda
        self.calendars = calendars or []
        self.holiday_agendas = holiday_agendas or {}
        self.available = available
        self.fetched: list[date] = []

    def is_available(self) -> bool:
        return self.available

    def fetch_agenda(self, day: date) -> str:
        self.fetched.append(day)
        return self.agenda

    def fetch_holiday_agenda(self, calendar_id: str, day: date) -> str:
        return self.holiday_agendas.get(calendar_id, "")

    def list_calendars(self) -> list[str]:
        return list(self.calendars)


class FakeScheduleStore:
    """In-memory schedule table."""

    def __init__(self, table="", available=True):
        self.table = table
        self.available = available
        self.writes: list[str] = []
        self.locked = False

    def is_available(self) -> bool:
        return self.available

    def read(self) -> str:
        return self.table

    def write(self, text: str) -> None:
        self.writes.append(text)
        self.table = text

    @contextmanager
    def lock(self):
        self.locked = True
        try:
            yield
        finally:
            self.locked = False


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def fake():
    Faker.seed(1234)
    return Faker()


@pytest.fixture
def meeting_title(fake):
    """A generated title free of out-of-office markers."""
    while True:
        title = fake.catch_phrase()
        lowered = title.lower()
        if "ooo" not in lowered and "out of office" not in lowered and "zoom" not in lowered:
            return title


@pytest.fixture
def zoom_link(fake):
    return f"https://zoom.example/j/{fake.numerify('##########')}"


@pytest.fixture
def agenda_row():
    """Build a gcalcli-style TSV agenda row."""

    def build(start: str, title: str, link: str | None = None, end: str = "", day: str = DATE_STRING):
        fields = [day, start, day, end]
        if link:
            fields += ["video", link]
        fields.append(title)
        return "\t".join(fields)

    return build


@pytest.fixture
def settings(tmp_path):
    return load_settings(
        {
            "CMC_BACKUP_DIR": str(tmp_path / "cmc"),
            "CMC_ENABLE_BACKUP": "true",
            "CMC_ENABLE_DEBUG": "true",
            "CMC_LOG_LIMIT": "100",
            "CMC_OFFSET_MIN": "1",
        }
    )


@pytest.fixture
def context(settings):
    return RunContext(settings=settings, now=datetime(2025, 11, 7, 8, 0))


@pytest.fixture
def event_log(settings):
    return EventLog(
        settings.log_file,
        debug=settings.enable_debug,
        clock=lambda: datetime(2025, 11, 7, 8, 0, 1),
    )


@pytest.fixture
def calendar():
    return FakeCalendarSource()


@pytest.fixture
def store():
    return FakeScheduleStore()
