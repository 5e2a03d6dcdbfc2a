"""
Agenda parsing: tab-delimited calendar records into Meeting entities.
"""

import re
from collections.abc import Callable, Iterable, Iterator
from datetime import date

from cronmeetcal.core.config import DEFAULT_LINK_PATTERN, NON_TITLE_TOKENS
from cronmeetcal.core.timemath import is_clock, parse_clock
from cronmeetcal.models.meetings import Meeting

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
URL_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def split_records(raw_agenda: str) -> list[list[str]]:
    """Split raw agenda text into records of tab-separated fields, dropping blank lines."""
    return [line.split("\t") for line in raw_agenda.splitlines() if line.strip()]


def is_join_link(field: str, link_pattern: str = DEFAULT_LINK_PATTERN) -> bool:
    token = field.strip()
    return bool(URL_RE.match(token)) and link_pattern.lower() in token.lower()


def find_join_link(fields: list[str], link_pattern: str = DEFAULT_LINK_PATTERN) -> str | None:
    """
    Return the first field that is a URL containing the meeting-platform pattern.

    A title or location that merely mentions the platform is not a link.
    """
    for field in fields:
        if is_join_link(field, link_pattern):
            return field.strip()
    return None


def is_title_candidate(field: str, date_string: str) -> bool:
    token = field.strip()
    if not token:
        return False
    if is_clock(token) or token.lower() in NON_TITLE_TOKENS:
        return False
    if URL_RE.match(token) or "https" in token:
        return False
    if token == date_string or DATE_RE.match(token):
        return False
    return True


def find_title(fields: list[str], date_string: str) -> str:
    """First field that isn't a time, marker, URL or date; original field order wins."""
    for field in fields:
        if is_title_candidate(field, date_string):
            return field.strip()
    return ""


def parse_event(
    fields: list[str], today: date, link_pattern: str = DEFAULT_LINK_PATTERN
) -> Meeting:
    """
    Parse one agenda record into a Meeting, with or without a join link.

    Field 2 holds the HH:MM start; an empty or missing field 2 marks an
    all-day event. Any other value raises ValueError.
    """
    date_string = today.strftime("%Y-%m-%d")
    time_field = fields[1].strip() if len(fields) > 1 else ""

    if time_field:
        start_time = parse_clock(time_field)
        is_all_day = False
    else:
        start_time = None
        is_all_day = True

    return Meeting(
        title=find_title(fields, date_string),
        start_time=start_time,
        date=today,
        join_link=find_join_link(fields, link_pattern),
        is_all_day=is_all_day,
    )


def parse_events(
    raw_agenda: str, today: date, link_pattern: str = DEFAULT_LINK_PATTERN
) -> list[Meeting]:
    """Parse every parseable record, including ones without a join link."""
    events = []
    for fields in split_records(raw_agenda):
        try:
            events.append(parse_event(fields, today, link_pattern))
        except ValueError:
            continue
    return events


def parse_agenda(
    agenda: str | Iterable[list[str]],
    today: date,
    on_skip: Callable[[str], None] | None = None,
    link_pattern: str = DEFAULT_LINK_PATTERN,
) -> Iterator[Meeting]:
    """
    Lazily yield Meetings that carry a join link, in input order.

    Records without a link, or with an unreadable start time, are skipped
    and reported through on_skip.
    """
    records = split_records(agenda) if isinstance(agenda, str) else agenda

    for fields in records:
        line = "\t".join(fields)
        if find_join_link(fields, link_pattern) is None:
            if on_skip and line.strip():
                on_skip(f"Skipping line: {line}")
            continue

        try:
            meeting = parse_event(fields, today, link_pattern)
        except ValueError as e:
            if on_skip:
                on_skip(f"Skipping line ({e}): {line}")
            continue

        if meeting.is_all_day:
            if on_skip:
                on_skip(f"Skipping all-day event: {line}")
            continue

        yield meeting
