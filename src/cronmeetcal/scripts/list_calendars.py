#!/usr/bin/env python3
"""
List the calendars visible to the configured calendar source, and the
holiday calendar that would be used for holiday detection.

Usage:
    uv run python src/cronmeetcal/scripts/list_calendars.py
    uv run python src/cronmeetcal/scripts/list_calendars.py --source graph
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from cronmeetcal.core.config import CALENDAR_SOURCES, load_settings
from cronmeetcal.core.errors import ClassificationAmbiguous
from cronmeetcal.services.calendar import build_calendar_source
from cronmeetcal.services.holidays import detect_country, resolve_holiday_calendar


def main(source: str | None = None) -> int:
    """List calendars and the resolved holiday calendar."""
    settings = load_settings()
    if source:
        settings = replace(settings, calendar_source=source)

    calendar = build_calendar_source(settings)
    if not calendar.is_available():
        print(f"Calendar source '{settings.calendar_source}' is not available")
        return 1

    print(f"Fetching calendars from {settings.calendar_source}...\n")
    calendars = calendar.list_calendars()
    print(f"Found {len(calendars)} calendars")
    print("=" * 80)
    for name in calendars:
        print(f"  - {name}")
    print("-" * 80)

    country = None
    if not settings.holiday_calendar:
        try:
            country = detect_country(settings.country_lookup_url)
            print(f"Country: {country}")
        except ClassificationAmbiguous as e:
            print(f"Country: unknown ({e})")

    holiday = resolve_holiday_calendar(calendars, country, settings.holiday_calendar)
    print(f"Holiday calendar: {holiday or 'None (holiday detection disabled)'}")
    return 0


def cli():
    parser = argparse.ArgumentParser(description="List calendars visible to CronMeetCal")
    parser.add_argument("--source", choices=CALENDAR_SOURCES, help="Calendar source")
    args = parser.parse_args()

    sys.exit(main(args.source))


if __name__ == "__main__":
    cli()
