"""
Meeting client discovery and launch command formatting.

The command is only formatted here; cron runs it.
"""

import shutil
import subprocess
from pathlib import Path

from cronmeetcal.core.config import OPEN_COMMAND, PAUSE_CLI
from cronmeetcal.core.errors import MissingDependencyError


def resolve_client_path(applications_dir: Path, pattern: str) -> Path:
    """
    Locate the meeting client's executable inside a macOS app bundle.

    e.g. /Applications/zoom.us.app -> /Applications/zoom.us.app/Contents/MacOS/zoom.us
    """
    needle = pattern.lower()
    apps = sorted(applications_dir.iterdir()) if applications_dir.is_dir() else []
    bundle = next((app for app in apps if needle in app.name.lower()), None)
    if bundle is None:
        raise MissingDependencyError(f"No '{pattern}' app found in {applications_dir}")

    client = bundle / "Contents" / "MacOS" / bundle.name.removesuffix(".app")
    if not client.is_file():
        raise MissingDependencyError(f"Meeting client not found at {client}")
    return client


def brew_prefix() -> Path | None:
    if shutil.which("brew") is None:
        return None
    try:
        result = subprocess.run(["brew", "--prefix"], capture_output=True, text=True, check=True)
    except (OSError, subprocess.CalledProcessError):
        return None
    return Path(result.stdout.strip())


def resolve_pause_command(prefix: Path | None = None) -> str:
    """Return a nowplaying-cli pause prefix when it is installed, else ''."""
    prefix = prefix or brew_prefix()
    if prefix is None:
        return ""
    cli = prefix / "bin" / PAUSE_CLI
    if not cli.is_file():
        return ""
    return f"{cli} pause 2>/dev/null; "


def build_command_prefix(client_path: Path, pause: str = "") -> str:
    return f"{pause}{OPEN_COMMAND} {client_path}"


def make_launcher(applications_dir: Path, pattern: str):
    """Return a callable resolving the command prefix at the point it is needed."""

    def launcher() -> str:
        client = resolve_client_path(applications_dir, pattern)
        return build_command_prefix(client, resolve_pause_command())

    return launcher
