"""
Holiday calendar resolution.

The country comes from the POSIX locale, falling back to a network lookup
when the locale doesn't name one. The country then selects a public
holiday calendar among those the calendar source can see.
"""

import locale
import os
from collections.abc import Callable
from datetime import date

import httpx

from cronmeetcal.core.agenda import parse_events
from cronmeetcal.core.config import COUNTRY_LOOKUP_TIMEOUT, COUNTRY_NAMES, Settings
from cronmeetcal.core.errors import ClassificationAmbiguous
from cronmeetcal.services.calendar import CalendarSource

AMBIGUOUS_LOCALES = {"", "c", "posix"}


def current_locale_name() -> str | None:
    for var in ("LC_ALL", "LC_TIME", "LANG"):
        value = os.environ.get(var)
        if value:
            return value
    return locale.getlocale()[0]


def country_from_locale(locale_name: str | None) -> str | None:
    """'en_US.UTF-8' -> 'US'. Returns None for C/POSIX or locales without a territory."""
    if not locale_name:
        return None
    base = locale_name.split(".")[0].split("@")[0]
    if base.lower() in AMBIGUOUS_LOCALES or "_" not in base:
        return None
    territory = base.split("_", 1)[1].upper()
    return territory if len(territory) == 2 and territory.isalpha() else None


def lookup_country(url: str, client: httpx.Client | None = None) -> str:
    """Ask a plain-text country endpoint (e.g. ipinfo.io/country) for a 2-letter code."""
    try:
        if client is None:
            with httpx.Client(timeout=COUNTRY_LOOKUP_TIMEOUT) as http:
                response = http.get(url)
        else:
            response = client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise ClassificationAmbiguous(f"country lookup failed: {e}") from e

    code = response.text.strip().upper()
    if len(code) != 2 or not code.isalpha():
        raise ClassificationAmbiguous(f"country lookup returned '{response.text.strip()}'")
    return code


def detect_country(
    url: str, locale_name: str | None = None, client: httpx.Client | None = None
) -> str:
    country = country_from_locale(locale_name or current_locale_name())
    if country:
        return country
    return lookup_country(url, client)


def resolve_holiday_calendar(
    calendars: list[str], country: str | None, override: str | None = None
) -> str | None:
    """Pick the holiday calendar: an explicit override, or one naming the country."""
    if override:
        return override if override in calendars else None
    if not country:
        return None

    country_name = COUNTRY_NAMES.get(country.upper(), country).lower()
    for name in calendars:
        lowered = name.lower()
        if "holiday" in lowered and country_name in lowered:
            return name
    return None


def build_holiday_lookup(
    source: CalendarSource,
    day: date,
    settings: Settings,
    locale_name: str | None = None,
    client: httpx.Client | None = None,
) -> Callable[[], list[str]]:
    """
    Return a callable yielding today's holiday names.

    Resolution happens on first call. Failures raise ClassificationAmbiguous
    so the classifier can treat the day as not-a-holiday.
    """

    def lookup() -> list[str]:
        country = None
        if not settings.holiday_calendar:
            country = detect_country(settings.country_lookup_url, locale_name, client)

        calendars = source.list_calendars()
        calendar_name = resolve_holiday_calendar(calendars, country, settings.holiday_calendar)
        if calendar_name is None:
            wanted = settings.holiday_calendar or f"country {country}"
            raise ClassificationAmbiguous(f"no holiday calendar found for {wanted}")

        raw = source.fetch_holiday_agenda(calendar_name, day)
        return [event.title for event in parse_events(raw, day) if event.title]

    return lookup
