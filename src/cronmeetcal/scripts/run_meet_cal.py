#!/usr/bin/env python3
"""
Autogenerate ephemeral crontab entries that open video meetings from today's calendar.

Reads today's agenda, skips the day when it is a holiday or you are out of
office, and otherwise replaces the managed block of your crontab with one
entry per upcoming meeting. Configure with CMC_* environment variables (or
a .env file).

Run it daily from cron:
    @daily /path/to/cron-meet-cal

Usage:
    uv run python src/cronmeetcal/scripts/run_meet_cal.py
    uv run python src/cronmeetcal/scripts/run_meet_cal.py --testing --source graph
"""

import argparse
import os
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from cronmeetcal.core.config import CALENDAR_SOURCES, load_settings
from cronmeetcal.core.errors import CronMeetCalError
from cronmeetcal.models.meetings import RunContext
from cronmeetcal.services.backups import FileBackupSink
from cronmeetcal.services.calendar import build_calendar_source
from cronmeetcal.services.coordinator import run
from cronmeetcal.services.crontab import CrontabStore
from cronmeetcal.services.event_log import EventLog
from cronmeetcal.services.holidays import build_holiday_lookup
from cronmeetcal.services.launcher import make_launcher


def main(testing: bool = False, source: str | None = None) -> int:
    """Main entry point. Returns the process exit code."""
    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Configuration error: {e}")
        return 2

    if testing:
        settings = replace(settings, testing=True)
    if source:
        settings = replace(settings, calendar_source=source)

    # Ensure brew-installed tools are found when run from cron
    os.environ["PATH"] = f"/opt/homebrew/bin:/usr/local/bin:{os.environ.get('PATH', '')}"

    context = RunContext(settings=settings, now=datetime.now())
    calendar = build_calendar_source(settings)
    event_log = EventLog(settings.log_file, debug=settings.enable_debug, echo=settings.testing)

    try:
        result = run(
            context,
            calendar,
            CrontabStore(settings.lock_file),
            event_log,
            backups=FileBackupSink(settings.backup_dir) if settings.enable_backup else None,
            launcher=make_launcher(settings.applications_dir, settings.link_pattern),
            holiday_lookup=build_holiday_lookup(calendar, context.today, settings),
        )
    except CronMeetCalError as e:
        print(f"\nError: {e}")
        return 1

    print(result.summary)
    return 0


def cli():
    parser = argparse.ArgumentParser(
        description="Schedule today's video meetings in your crontab"
    )
    parser.add_argument(
        "--testing",
        action="store_true",
        help="Echo log lines and the agenda to stdout, and include already-started events",
    )
    parser.add_argument(
        "--source",
        choices=CALENDAR_SOURCES,
        help="Calendar source (defaults to CMC_CALENDAR_SOURCE or gcalcli)",
    )
    args = parser.parse_args()

    sys.exit(main(testing=args.testing, source=args.source))


if __name__ == "__main__":
    cli()
