"""
The user's crontab as a schedule store.
"""

import fcntl
import shutil
import subprocess
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import Protocol

from cronmeetcal.core.errors import ScheduleIOError

CRONTAB = "crontab"
NO_CRONTAB_MESSAGE = "no crontab for"


class ScheduleStore(Protocol):
    def is_available(self) -> bool: ...

    def read(self) -> str: ...

    def write(self, text: str) -> None: ...

    def lock(self) -> AbstractContextManager[None]: ...


@contextmanager
def advisory_lock(path: Path) -> Iterator[None]:
    """
    Hold a non-blocking exclusive flock on `path` for the duration.

    Raises ScheduleIOError if another run already holds it.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as handle:
        try:
            fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            raise ScheduleIOError(f"Another run holds the lock at {path}") from None
        try:
            yield
        finally:
            fcntl.flock(handle, fcntl.LOCK_UN)


class CrontabStore:
    """Reads and writes the current user's crontab via `crontab -l` / `crontab -`."""

    def __init__(self, lock_file: Path):
        self.lock_file = lock_file

    def is_available(self) -> bool:
        return shutil.which(CRONTAB) is not None

    def read(self) -> str:
        try:
            result = subprocess.run([CRONTAB, "-l"], capture_output=True, text=True)
        except OSError as e:
            raise ScheduleIOError(f"Could not run crontab: {e}") from e

        if result.returncode != 0:
            if NO_CRONTAB_MESSAGE in result.stderr:
                return ""
            raise ScheduleIOError(f"crontab -l failed: {result.stderr.strip()}")
        return result.stdout

    def write(self, text: str) -> None:
        try:
            result = subprocess.run(
                [CRONTAB, "-"], input=text, capture_output=True, text=True
            )
        except OSError as e:
            raise ScheduleIOError(f"Could not run crontab: {e}") from e

        if result.returncode != 0:
            raise ScheduleIOError(f"crontab - failed: {result.stderr.strip()}")

    def lock(self) -> AbstractContextManager[None]:
        return advisory_lock(self.lock_file)
