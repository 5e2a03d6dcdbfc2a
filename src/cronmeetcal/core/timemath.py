"""
Wall-clock arithmetic for trigger times. Pure functions, no clock reads.
"""

import re
from datetime import time

MINUTES_PER_DAY = 24 * 60

CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_clock(text: str) -> time:
    """Parse an 'HH:MM' token into a time."""
    match = CLOCK_RE.match(text.strip())
    if not match:
        raise ValueError(f"Not an HH:MM time: '{text}'")
    return time(int(match.group(1)), int(match.group(2)))


def is_clock(text: str) -> bool:
    return bool(CLOCK_RE.match(text.strip()))


def apply_offset_minutes(t: time, offset_minutes: int) -> time:
    """
    Subtract offset_minutes from a time of day.

    Wraps across midnight, so 00:00 minus 1 minute is 23:59. Use
    crosses_midnight() to tell whether that happened.
    """
    total = (t.hour * 60 + t.minute - offset_minutes) % MINUTES_PER_DAY
    return time(total // 60, total % 60)


def crosses_midnight(t: time, offset_minutes: int) -> bool:
    """True when subtracting the offset lands on the previous day."""
    return t.hour * 60 + t.minute - offset_minutes < 0


def is_strictly_future(now_hour: int, now_minute: int, target_hour: int, target_minute: int) -> bool:
    """
    Whether target is later than now.

    An exact hour:minute match counts as already passed.
    """
    if target_hour < now_hour:
        return False
    if target_hour == now_hour and target_minute <= now_minute:
        return False
    return True
