"""
Data models for meetings, scheduled jobs and runs.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum

from cronmeetcal.core.config import Settings


class AgendaMode(Enum):
    """Per-run classification of the day's agenda."""

    NORMAL = "normal"
    HOLIDAY = "holiday"
    OUT_OF_OFFICE = "out_of_office"
    EMPTY = "empty"


@dataclass(frozen=True)
class Meeting:
    """One parsed agenda record."""

    title: str
    start_time: time | None
    date: date
    join_link: str | None = None
    is_all_day: bool = False

    @property
    def schedulable(self) -> bool:
        return self.join_link is not None and self.start_time is not None


@dataclass(frozen=True)
class ScheduledJob:
    """A single-day crontab entry that opens a meeting."""

    trigger_hour: int
    trigger_minute: int
    weekday: int  # ISO weekday, 1=Monday .. 7=Sunday
    command: str
    comment: str
    source_meeting_title: str

    def __post_init__(self):
        if not 0 <= self.trigger_hour <= 23:
            raise ValueError(f"trigger_hour out of range: {self.trigger_hour}")
        if not 0 <= self.trigger_minute <= 59:
            raise ValueError(f"trigger_minute out of range: {self.trigger_minute}")
        if not 1 <= self.weekday <= 7:
            raise ValueError(f"weekday out of range: {self.weekday}")

    @property
    def cron_line(self) -> str:
        return f"{self.trigger_minute} {self.trigger_hour} * * {self.weekday} {self.command}"

    def lines(self) -> list[str]:
        return [self.comment, self.cron_line]


@dataclass(frozen=True)
class BackupSnapshot:
    """Crontab contents captured at run start and end."""

    period_key: str
    before: str
    after: str

    @property
    def changed(self) -> bool:
        return self.before != self.after


@dataclass(frozen=True)
class RunContext:
    """Immutable per-run values threaded through the coordinator."""

    settings: Settings
    now: datetime

    @property
    def today(self) -> date:
        return self.now.date()

    @property
    def date_string(self) -> str:
        return self.now.strftime("%Y-%m-%d")

    @property
    def weekday(self) -> int:
        return self.now.isoweekday()

    @property
    def day_name(self) -> str:
        return self.now.strftime("%A").lower()
