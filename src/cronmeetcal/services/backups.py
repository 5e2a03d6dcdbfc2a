"""
Before/after crontab backups, one directory per period.

Layout: <backup_dir>/<weekday>/[<HH>/]crontab.bak and crontab.new. The
weekday directories give one week of history; the hour level only exists
when our own crontab entry runs @hourly.
"""

import shutil
from datetime import datetime
from pathlib import Path

from cronmeetcal.core.config import BACKUP_FILE_AFTER, BACKUP_FILE_BEFORE, SELF_ENTRY_PATTERN
from cronmeetcal.models.meetings import BackupSnapshot


def check_cron_frequency(table: str) -> str:
    """'hourly' if our own crontab entry runs hourly, else 'daily'."""
    for line in table.splitlines():
        if SELF_ENTRY_PATTERN in line and "hourly" in line:
            return "hourly"
    return "daily"


def backup_period_key(table: str, now: datetime) -> str:
    key = now.strftime("%A").lower()
    if check_cron_frequency(table) == "hourly":
        key += f"/{now.strftime('%H')}"
    return key


class FileBackupSink:
    """Stores snapshots under backup_dir; unchanged snapshots leave nothing behind."""

    def __init__(self, backup_dir: Path):
        self.backup_dir = backup_dir

    def period_dir(self, period_key: str) -> Path:
        return self.backup_dir / period_key

    def store_before(self, period_key: str, before: str) -> None:
        """Write the pre-run table ahead of any change to the schedule."""
        target = self.period_dir(period_key)
        target.mkdir(parents=True, exist_ok=True)
        (target / BACKUP_FILE_BEFORE).write_text(before)

    def store(self, period_key: str, before: str, after: str) -> bool:
        """Write the snapshot. Returns False (and removes the period dir) if nothing changed."""
        snapshot = BackupSnapshot(period_key=period_key, before=before, after=after)
        target = self.period_dir(snapshot.period_key)

        if not snapshot.changed:
            if target.exists():
                shutil.rmtree(target)
            return False

        target.mkdir(parents=True, exist_ok=True)
        (target / BACKUP_FILE_BEFORE).write_text(snapshot.before)
        (target / BACKUP_FILE_AFTER).write_text(snapshot.after)
        return True
