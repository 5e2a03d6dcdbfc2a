"""
Crontab reconciliation: strip the managed block and rebuild it from today's meetings.
"""

from collections.abc import Callable, Iterable
from datetime import datetime

from cronmeetcal.core.config import ANCHOR, ANCHOR_TEXT
from cronmeetcal.core.timemath import apply_offset_minutes, crosses_midnight, is_strictly_future
from cronmeetcal.models.meetings import Meeting, ScheduledJob


def split_table(text: str) -> list[str]:
    """Tokenize crontab text into lines."""
    return text.splitlines()


def join_table(lines: list[str]) -> str:
    return "\n".join(lines) + "\n" if lines else ""


def is_anchor(line: str) -> bool:
    return ANCHOR_TEXT in line


def strip_managed_block(lines: Iterable[str]) -> tuple[list[str], bool]:
    """
    Copy lines up to and including the first anchor; drop everything after.

    Returns (prefix_lines, anchor_found). Only the first anchor is honoured.
    """
    prefix = []
    for line in lines:
        prefix.append(line)
        if is_anchor(line):
            return prefix, True
    return prefix, False


def remove_managed_entries(current_table: str) -> str:
    """Removal-only pass: the table with everything after the anchor dropped."""
    prefix, _ = strip_managed_block(split_table(current_table))
    return join_table(prefix)


def build_job(
    meeting: Meeting,
    offset_minutes: int,
    weekday: int,
    command_prefix: str,
    date_string: str,
) -> ScheduledJob:
    """Turn a meeting into a single-day crontab job fired offset_minutes early."""
    trigger = apply_offset_minutes(meeting.start_time, offset_minutes)
    start = meeting.start_time.strftime("%H:%M")
    command = f"{command_prefix} {meeting.join_link}".strip()
    return ScheduledJob(
        trigger_hour=trigger.hour,
        trigger_minute=trigger.minute,
        weekday=weekday,
        command=command,
        comment=f"# Open meeting: {meeting.title} | {date_string} @{start}",
        source_meeting_title=meeting.title,
    )


def reconcile(
    current_table: str,
    meetings: Iterable[Meeting],
    offset_minutes: int,
    now: datetime,
    command_prefix: str = "",
    on_skip: Callable[[str], None] | None = None,
) -> tuple[str, int]:
    """
    Rebuild the managed block for today's meetings.

    Returns the new table text and the number of jobs inserted. Meetings
    whose trigger time is not strictly after `now` are dropped, as are
    meetings whose offset reaches back into the previous day.
    """
    meetings = list(meetings)
    lines, anchor_found = strip_managed_block(split_table(current_table))

    if meetings and not anchor_found:
        while lines and not lines[-1].strip():
            lines.pop()
        if lines:
            lines.append("")
        lines.append(ANCHOR)

    date_string = now.strftime("%Y-%m-%d")
    weekday = now.isoweekday()
    inserted = 0

    for meeting in meetings:
        if not meeting.schedulable:
            continue

        if crosses_midnight(meeting.start_time, offset_minutes):
            if on_skip:
                on_skip(f"Skipping '{meeting.title}': offset reaches previous day")
            continue

        job = build_job(meeting, offset_minutes, weekday, command_prefix, date_string)
        if not is_strictly_future(now.hour, now.minute, job.trigger_hour, job.trigger_minute):
            continue

        lines.extend(job.lines())
        inserted += 1

    return join_table(lines), inserted
