"""File-backed event log, trimmed by tail truncation."""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path


class EventLog:
    """
    Append-only event log at `path`.

    Lines look like '[2025-11-07 08:00:01] - message'. In echo mode every
    message is also printed to stdout.
    """

    def __init__(
        self,
        path: Path,
        debug: bool = False,
        echo: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.path = path
        self.debug_enabled = debug
        self.echo = echo
        self.clock = clock

    def ensure_exists(self) -> bool:
        """Create the log file and its directory. Returns True if it was created."""
        if self.path.exists():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch()
        return True

    def append(self, message: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        stamp = self.clock().strftime("%Y-%m-%d %H:%M:%S")
        with open(self.path, "a") as f:
            f.write(f"[{stamp}] - {message}\n")
        if self.echo:
            print(message)

    def debug(self, message: str) -> None:
        if self.debug_enabled:
            self.append(message)

    def error(self, message: str) -> None:
        self.append(f"ERROR: {message}")

    def read_all(self) -> list[str]:
        if not self.path.exists():
            return []
        return self.path.read_text().splitlines()

    def truncate_to_last(self, n: int) -> None:
        """Keep only the last n lines, in order."""
        if n <= 0:
            raise ValueError(f"n must be positive, got {n}")
        lines = self.read_all()
        if len(lines) <= n:
            return
        self.path.write_text("\n".join(lines[-n:]) + "\n")
