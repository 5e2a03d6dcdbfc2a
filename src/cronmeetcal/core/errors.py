"""
Exceptions raised across a run.
"""


class CronMeetCalError(Exception):
    """Base exception for fatal run errors."""

    pass


class MissingDependencyError(CronMeetCalError):
    """A required external tool (calendar CLI, crontab, meeting client) is unavailable."""

    pass


class ScheduleIOError(CronMeetCalError):
    """Reading or writing the schedule table failed."""

    pass


class ClassificationAmbiguous(Exception):
    """Holiday data could not be resolved; classification falls back to not-a-holiday."""

    pass
