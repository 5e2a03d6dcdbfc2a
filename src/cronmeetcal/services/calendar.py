"""
Calendar sources: fetch today's agenda as tab-delimited records.

Two implementations share one record shape:
    start_date, start_time, end_date, end_time, [conference type, join link, location,] title

GcalcliCalendarSource shells out to gcalcli; GraphCalendarSource reads the
mailbox of CMC_GRAPH_USER through MS Graph.
"""

import asyncio
import shutil
import subprocess
from datetime import date, datetime, time, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from cronmeetcal.core.agenda import find_join_link
from cronmeetcal.core.config import Settings
from cronmeetcal.core.graph_client import get_graph_client, graph_configured

GCALCLI = "gcalcli"
HEADER_PREFIX = "start_date"
CALENDAR_ACCESS_ROLES = {"owner", "writer", "reader", "freebusy"}


class CalendarSource(Protocol):
    def is_available(self) -> bool: ...

    def fetch_agenda(self, day: date) -> str: ...

    def fetch_holiday_agenda(self, calendar_id: str, day: date) -> str: ...

    def list_calendars(self) -> list[str]: ...


def filter_agenda(raw: str, day: date, exclude_patterns: tuple[str, ...] = ()) -> str:
    """Keep rows for `day`, dropping header rows and rows matching an exclusion pattern."""
    date_string = day.strftime("%Y-%m-%d")
    kept = []
    for line in raw.splitlines():
        if not line.strip() or line.startswith(HEADER_PREFIX):
            continue
        if date_string not in line:
            continue
        if any(pattern in line for pattern in exclude_patterns):
            continue
        kept.append(line)
    return "\n".join(kept)


def parse_calendar_list(output: str) -> list[str]:
    """
    Parse `gcalcli list` output into calendar names.

    Example input:
         Access  Title
         ------  -----
          owner  me@example.com
         reader  Holidays in United States
    """
    names = []
    for line in output.splitlines():
        parts = line.strip().split(None, 1)
        if len(parts) == 2 and parts[0].lower() in CALENDAR_ACCESS_ROLES:
            names.append(parts[1].strip())
    return names


# =============================================================================
# GCALCLI
# =============================================================================


class GcalcliCalendarSource:
    """Agenda access through the gcalcli command-line client."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def is_available(self) -> bool:
        return shutil.which(GCALCLI) is not None

    def _run(self, args: list[str]) -> str:
        # A failed fetch reads the same as an empty day
        try:
            result = subprocess.run(
                [GCALCLI, *args], capture_output=True, text=True, check=True
            )
        except (OSError, subprocess.CalledProcessError):
            return ""
        return result.stdout

    def _agenda_args(self, day: date) -> list[str]:
        args = ["agenda", "--details", "location", "--details", "conference", "--military", "--tsv"]
        if not self.settings.testing:
            args.append("--nostarted")
        args += [day.isoformat(), (day + timedelta(days=1)).isoformat()]
        return args

    def fetch_agenda(self, day: date) -> str:
        raw = self._run(self._agenda_args(day))
        return filter_agenda(raw, day, self.settings.exclude_patterns)

    def fetch_holiday_agenda(self, calendar_id: str, day: date) -> str:
        raw = self._run(["--calendar", calendar_id, *self._agenda_args(day)])
        return filter_agenda(raw, day)

    def list_calendars(self) -> list[str]:
        return parse_calendar_list(self._run(["list", "--nocolor"]))


# =============================================================================
# MS GRAPH
# =============================================================================


def _graph_datetime(value, local_tz) -> datetime | None:
    """Convert a Graph DateTimeTimeZone into local time."""
    if value is None or not value.date_time:
        return None
    # Graph returns 7 fractional digits; seconds precision is enough
    naive = datetime.fromisoformat(value.date_time[:19])
    try:
        source_tz = ZoneInfo(value.time_zone or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        source_tz = ZoneInfo("UTC")
    return naive.replace(tzinfo=source_tz).astimezone(local_tz)


def event_to_record(event, link_pattern: str, local_tz=None) -> list[str] | None:
    """Render a Graph event into the shared agenda record shape."""
    start = _graph_datetime(event.start, local_tz)
    end = _graph_datetime(event.end, local_tz)
    if start is None:
        return None

    location = ""
    if event.location and event.location.display_name:
        location = event.location.display_name

    candidates = []
    if event.online_meeting and event.online_meeting.join_url:
        candidates.append(event.online_meeting.join_url)
    if event.online_meeting_url:
        candidates.append(event.online_meeting_url)
    candidates.append(location)
    link = find_join_link([c for c in candidates if c], link_pattern) or ""

    all_day = bool(event.is_all_day)
    return [
        start.strftime("%Y-%m-%d"),
        "" if all_day else start.strftime("%H:%M"),
        end.strftime("%Y-%m-%d") if end else "",
        "" if all_day or end is None else end.strftime("%H:%M"),
        "video" if link else "",
        link,
        location if location != link else "",
        event.subject or "",
    ]


class GraphCalendarSource:
    """Agenda access through the MS Graph calendar API."""

    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self._client = client

    @property
    def graph(self):
        if self._client is None:
            self._client = get_graph_client(self.settings)
        return self._client

    def is_available(self) -> bool:
        return graph_configured(self.settings)

    async def _calendar_ids(self) -> dict[str, str]:
        response = await self.graph.users.by_user_id(self.settings.graph_user).calendars.get()
        calendars = response.value if response and response.value else []
        return {cal.name: cal.id for cal in calendars if cal.name}

    async def _fetch_events(self, calendar_id: str | None, day: date) -> list:
        from msgraph.generated.users.item.calendars.item.events.events_request_builder import (
            EventsRequestBuilder,
        )

        local_tz = datetime.now().astimezone().tzinfo
        start_dt = datetime.combine(day, time.min, tzinfo=local_tz).astimezone(ZoneInfo("UTC"))
        end_dt = start_dt + timedelta(days=1)
        start_str = start_dt.strftime("%Y-%m-%dT%H:%M:%SZ")
        end_str = end_dt.strftime("%Y-%m-%dT%H:%M:%SZ")

        query_params = EventsRequestBuilder.EventsRequestBuilderGetQueryParameters(
            filter=f"start/dateTime ge '{start_str}' and start/dateTime lt '{end_str}'",
            orderby=["start/dateTime"],
            top=100,
        )
        config = EventsRequestBuilder.EventsRequestBuilderGetRequestConfiguration(
            query_parameters=query_params
        )

        user = self.graph.users.by_user_id(self.settings.graph_user)
        if calendar_id:
            builder = user.calendars.by_calendar_id(calendar_id).events
        else:
            builder = user.calendar.events
        response = await builder.get(request_configuration=config)
        return response.value if response and response.value else []

    def _render(self, events: list, day: date, exclude_patterns: tuple[str, ...]) -> str:
        local_tz = datetime.now().astimezone().tzinfo
        rows = []
        for event in events:
            record = event_to_record(event, self.settings.link_pattern, local_tz)
            if record:
                rows.append("\t".join(record))
        return filter_agenda("\n".join(rows), day, exclude_patterns)

    def fetch_agenda(self, day: date) -> str:
        try:
            events = asyncio.run(self._fetch_events(None, day))
        except Exception as e:
            print(f"  Error fetching events: {e}")
            return ""
        return self._render(events, day, self.settings.exclude_patterns)

    def fetch_holiday_agenda(self, calendar_id: str, day: date) -> str:
        async def fetch():
            ids = await self._calendar_ids()
            if calendar_id not in ids:
                return []
            return await self._fetch_events(ids[calendar_id], day)

        try:
            events = asyncio.run(fetch())
        except Exception as e:
            print(f"  Error fetching holiday events: {e}")
            return ""
        return self._render(events, day, ())

    def list_calendars(self) -> list[str]:
        try:
            ids = asyncio.run(self._calendar_ids())
        except Exception as e:
            print(f"  Error listing calendars: {e}")
            return []
        return list(ids)


def build_calendar_source(settings: Settings) -> CalendarSource:
    if settings.calendar_source == "graph":
        return GraphCalendarSource(settings)
    return GcalcliCalendarSource(settings)
