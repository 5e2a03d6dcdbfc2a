"""
Configuration constants and environment setup.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# CRONTAB
# =============================================================================

ANCHOR = "########## Managed by CronMeetCal ##########"
ANCHOR_TEXT = "Managed by CronMeetCal"
SELF_ENTRY_PATTERN = "cron-meet-cal"  # how we find our own @daily/@hourly line
BACKUP_FILE_BEFORE = "crontab.bak"
BACKUP_FILE_AFTER = "crontab.new"

# =============================================================================
# AGENDA PARSING
# =============================================================================

DEFAULT_LINK_PATTERN = "zoom"
DEFAULT_EXCLUDE_PATTERNS = ("Home",)

# Conference-type and all-day tokens gcalcli emits that are never a title
NON_TITLE_TOKENS = {"video", "phone", "more", "all-day"}

# Matched case-insensitively against the raw agenda
OUT_OF_OFFICE_MARKERS = ("ooo", "out of office")

# =============================================================================
# CLASSIFICATION
# =============================================================================

MODE_TOKENS = ("ooo", "holiday", "empty")
DEFAULT_MODE_PRECEDENCE = ("ooo", "holiday", "empty")

# Country code -> name as it appears in public holiday calendar names
COUNTRY_NAMES = {
    "AU": "Australia",
    "BR": "Brazil",
    "CA": "Canada",
    "DE": "Germany",
    "ES": "Spain",
    "FR": "France",
    "GB": "United Kingdom",
    "IE": "Ireland",
    "IN": "India",
    "IT": "Italy",
    "JP": "Japan",
    "MX": "Mexico",
    "NL": "Netherlands",
    "NZ": "New Zealand",
    "US": "United States",
}

DEFAULT_COUNTRY_LOOKUP_URL = "https://ipinfo.io/country"
COUNTRY_LOOKUP_TIMEOUT = 5.0

# =============================================================================
# LAUNCHER
# =============================================================================

DEFAULT_APPLICATIONS_DIR = "/Applications"
OPEN_COMMAND = "/usr/bin/open -a"
PAUSE_CLI = "nowplaying-cli"

# =============================================================================
# DEFAULTS (overridable from environment)
# =============================================================================

DEFAULT_BACKUP_DIR = "/tmp/cmc"
DEFAULT_LOG_LIMIT = 100
DEFAULT_OFFSET_MIN = 1
CALENDAR_SOURCES = ("gcalcli", "graph")


@dataclass(frozen=True)
class Settings:
    """Resolved run configuration."""

    backup_dir: Path
    enable_backup: bool
    enable_debug: bool
    log_file: Path
    log_limit: int
    offset_minutes: int
    testing: bool = False
    link_pattern: str = DEFAULT_LINK_PATTERN
    exclude_patterns: tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS
    mode_precedence: tuple[str, ...] = DEFAULT_MODE_PRECEDENCE
    holiday_calendar: str | None = None
    country_lookup_url: str = DEFAULT_COUNTRY_LOOKUP_URL
    calendar_source: str = "gcalcli"
    applications_dir: Path = Path(DEFAULT_APPLICATIONS_DIR)
    lock_file: Path | None = None
    graph_tenant_id: str = ""
    graph_app_id: str = ""
    graph_client_secret: str = ""
    graph_user: str = ""


def _flag(value: str) -> bool:
    return value.strip().lower() == "true"


def _int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{value}'") from None


def _list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def parse_precedence(value: str) -> tuple[str, ...]:
    """
    Parse a comma-separated mode precedence such as 'ooo,holiday,empty'.

    Every token must be known and appear once; missing tokens are appended
    in default order so each check still runs.
    """
    tokens = tuple(token.lower() for token in _list(value))
    unknown = [t for t in tokens if t not in MODE_TOKENS]
    if unknown:
        raise ValueError(f"Unknown mode precedence token(s): {', '.join(unknown)}")
    if len(set(tokens)) != len(tokens):
        raise ValueError(f"Duplicate mode precedence token in '{value}'")
    return tokens + tuple(t for t in DEFAULT_MODE_PRECEDENCE if t not in tokens)


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build Settings from CMC_* environment variables."""
    env = os.environ if environ is None else environ

    backup_dir = Path(env.get("CMC_BACKUP_DIR", DEFAULT_BACKUP_DIR))
    log_file = Path(env.get("CMC_LOG_FILE", str(backup_dir / "events.log")))
    log_limit = _int("CMC_LOG_LIMIT", env.get("CMC_LOG_LIMIT", str(DEFAULT_LOG_LIMIT)))
    offset = _int("CMC_OFFSET_MIN", env.get("CMC_OFFSET_MIN", str(DEFAULT_OFFSET_MIN)))

    if log_limit <= 0:
        raise ValueError(f"CMC_LOG_LIMIT must be greater than 0, got {log_limit}")
    if offset < 0:
        raise ValueError(f"CMC_OFFSET_MIN must not be negative, got {offset}")

    source = env.get("CMC_CALENDAR_SOURCE", "gcalcli").lower()
    if source not in CALENDAR_SOURCES:
        raise ValueError(f"CMC_CALENDAR_SOURCE must be one of {CALENDAR_SOURCES}, got '{source}'")

    lock_file = env.get("CMC_LOCK_FILE")

    return Settings(
        backup_dir=backup_dir,
        enable_backup=_flag(env.get("CMC_ENABLE_BACKUP", "true")),
        enable_debug=_flag(env.get("CMC_ENABLE_DEBUG", "true")),
        log_file=log_file,
        log_limit=log_limit,
        offset_minutes=offset,
        testing=_flag(env.get("CMC_TESTING", "false")),
        link_pattern=env.get("CMC_LINK_PATTERN", DEFAULT_LINK_PATTERN),
        exclude_patterns=_list(env.get("CMC_EXCLUDE_PATTERNS", ",".join(DEFAULT_EXCLUDE_PATTERNS))),
        mode_precedence=parse_precedence(
            env.get("CMC_MODE_PRECEDENCE", ",".join(DEFAULT_MODE_PRECEDENCE))
        ),
        holiday_calendar=env.get("CMC_HOLIDAY_CALENDAR") or None,
        country_lookup_url=env.get("CMC_COUNTRY_LOOKUP_URL", DEFAULT_COUNTRY_LOOKUP_URL),
        calendar_source=source,
        applications_dir=Path(env.get("CMC_APPLICATIONS_DIR", DEFAULT_APPLICATIONS_DIR)),
        lock_file=Path(lock_file) if lock_file else backup_dir / ".lock",
        graph_tenant_id=env.get("MICROSOFT_GRAPH_TENANT_ID", ""),
        graph_app_id=env.get("MICROSOFT_GRAPH_APP_ID", ""),
        graph_client_secret=env.get("MICROSOFT_GRAPH_CLIENT_SECRET", ""),
        graph_user=env.get("CMC_GRAPH_USER", ""),
    )
