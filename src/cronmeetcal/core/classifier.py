"""
Agenda classification: decide whether today's meetings get scheduled.
"""

from collections.abc import Callable, Iterable
from datetime import date

from cronmeetcal.core.agenda import parse_events
from cronmeetcal.core.config import (
    DEFAULT_LINK_PATTERN,
    DEFAULT_MODE_PRECEDENCE,
    OUT_OF_OFFICE_MARKERS,
)
from cronmeetcal.core.errors import ClassificationAmbiguous
from cronmeetcal.models.meetings import AgendaMode, Meeting

HolidayLookup = Callable[[], list[str]]


def is_out_of_office(raw_agenda: str) -> bool:
    text = raw_agenda.lower()
    return any(marker in text for marker in OUT_OF_OFFICE_MARKERS)


def find_confirmed_holiday(
    raw_agenda: str,
    holiday_names: Iterable[str],
    today: date,
    link_pattern: str = DEFAULT_LINK_PATTERN,
) -> str | None:
    """
    Return the holiday name that also appears as a timed event in the agenda.

    Names are matched case-insensitively; all-day entries in the agenda are
    ignored.
    """
    wanted = {name.strip().lower(): name.strip() for name in holiday_names if name.strip()}
    if not wanted:
        return None

    for event in parse_events(raw_agenda, today, link_pattern):
        if event.is_all_day:
            continue
        key = event.title.lower()
        if key in wanted:
            return wanted[key]
    return None


def classify(
    meetings: Iterable[Meeting],
    raw_agenda: str,
    holiday_lookup: HolidayLookup | None = None,
    today: date | None = None,
    precedence: tuple[str, ...] = DEFAULT_MODE_PRECEDENCE,
    on_decision: Callable[[str], None] | None = None,
    link_pattern: str = DEFAULT_LINK_PATTERN,
) -> AgendaMode:
    """
    Classify the day as OutOfOffice, Holiday, Empty or Normal.

    Checks run in `precedence` order ('ooo', 'holiday', 'empty'); the first
    match wins and Normal is the fallback.
    """
    meetings = list(meetings)
    today = today or (meetings[0].date if meetings else date.today())

    def report(message: str):
        if on_decision:
            on_decision(message)

    def check_ooo() -> bool:
        if is_out_of_office(raw_agenda):
            report("OOO detected, skipping update")
            return True
        return False

    def check_holiday() -> bool:
        if holiday_lookup is None or not raw_agenda.strip():
            return False
        try:
            names = holiday_lookup()
        except ClassificationAmbiguous as e:
            report(f"Holiday check skipped: {e}")
            return False
        holiday = find_confirmed_holiday(raw_agenda, names, today, link_pattern)
        if holiday:
            report(f"Holiday detected ({holiday}), skipping update")
            return True
        return False

    def check_empty() -> bool:
        if not raw_agenda.strip() or not any(m.join_link for m in meetings):
            report("No meetings detected, nothing to add")
            return True
        return False

    checks = {
        "ooo": (check_ooo, AgendaMode.OUT_OF_OFFICE),
        "holiday": (check_holiday, AgendaMode.HOLIDAY),
        "empty": (check_empty, AgendaMode.EMPTY),
    }

    for token in precedence:
        check, mode = checks[token]
        if check():
            return mode

    count = sum(1 for m in meetings if m.join_link)
    noun = "meeting" if count == 1 else "meetings"
    report(f"{count} {noun} detected, updating crontab")
    return AgendaMode.NORMAL
