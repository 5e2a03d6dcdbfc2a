"""
One CronMeetCal run: fetch, classify, reconcile, commit, log, back up.
"""

from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass, replace
from typing import Protocol

from cronmeetcal.core.agenda import parse_agenda
from cronmeetcal.core.classifier import HolidayLookup, classify
from cronmeetcal.core.errors import CronMeetCalError, MissingDependencyError, ScheduleIOError
from cronmeetcal.core.reconciler import (
    reconcile,
    remove_managed_entries,
    split_table,
    strip_managed_block,
)
from cronmeetcal.models.meetings import AgendaMode, RunContext
from cronmeetcal.services.backups import backup_period_key
from cronmeetcal.services.calendar import CalendarSource
from cronmeetcal.services.crontab import ScheduleStore
from cronmeetcal.services.event_log import EventLog


class BackupSink(Protocol):
    def store_before(self, period_key: str, before: str) -> None: ...

    def store(self, period_key: str, before: str, after: str) -> bool: ...


@dataclass(frozen=True)
class RunResult:
    """Outcome of a single run."""

    mode: AgendaMode
    meetings_detected: int
    inserted: int
    backup_kept: bool | None = None

    @property
    def summary(self) -> str:
        return (
            f"Run complete: mode={self.mode.value}, "
            f"meetings={self.meetings_detected}, scheduled={self.inserted}"
        )


def ensure_dependencies(calendar: CalendarSource, store: ScheduleStore):
    if not calendar.is_available():
        raise MissingDependencyError(
            "Calendar source is not available. Install and initialize gcalcli "
            "(`brew install gcalcli`) or configure MS Graph credentials, and try again"
        )
    if not store.is_available():
        raise MissingDependencyError("crontab is not installed, cannot schedule meetings")


def run(
    context: RunContext,
    calendar: CalendarSource,
    store: ScheduleStore,
    event_log: EventLog,
    backups: BackupSink | None = None,
    launcher: Callable[[], str] | None = None,
    holiday_lookup: HolidayLookup | None = None,
) -> RunResult:
    """
    Execute one run against the schedule store.

    Fatal errors are logged with an ERROR tag and re-raised; file errors
    from the event log or backups surface as ScheduleIOError. Anything
    already written to the store stays written.
    """
    settings = context.settings

    try:
        if event_log.ensure_exists():
            event_log.debug(f"Creating log file at {event_log.path}")

        ensure_dependencies(calendar, store)

        with store.lock():
            current = store.read()
            agenda = calendar.fetch_agenda(context.today)
            if settings.testing:
                print(f"AGENDA:\n{agenda}\n")

            period_key = None
            if settings.enable_backup and backups is not None:
                period_key = backup_period_key(current, context.now)
                event_log.debug(f"Backing up crontab for {period_key}")
                backups.store_before(period_key, current)

            _, anchor_found = strip_managed_block(split_table(current))
            if anchor_found:
                event_log.debug("Removing previous entries")

            meetings = list(
                parse_agenda(
                    agenda,
                    context.today,
                    on_skip=event_log.debug,
                    link_pattern=settings.link_pattern,
                )
            )
            mode = classify(
                meetings,
                agenda,
                holiday_lookup=holiday_lookup,
                today=context.today,
                precedence=settings.mode_precedence,
                on_decision=event_log.append,
                link_pattern=settings.link_pattern,
            )

            if mode is AgendaMode.NORMAL:
                command_prefix = launcher() if launcher else ""
                new_table, inserted = reconcile(
                    current,
                    meetings,
                    settings.offset_minutes,
                    context.now,
                    command_prefix=command_prefix,
                    on_skip=event_log.debug,
                )
            else:
                new_table, inserted = remove_managed_entries(current), 0

            store.write(new_table)

        result = RunResult(mode=mode, meetings_detected=len(meetings), inserted=inserted)
        event_log.append(result.summary)
        event_log.truncate_to_last(settings.log_limit)

        if period_key is not None:
            kept = backups.store(period_key, current, store.read())
            result = replace(result, backup_kept=kept)
        return result

    except CronMeetCalError as e:
        event_log.error(str(e))
        raise
    except OSError as e:
        error = ScheduleIOError(f"File operation failed: {e}")
        # The event log itself may be what failed
        with suppress(OSError):
            event_log.error(str(error))
        raise error from e
