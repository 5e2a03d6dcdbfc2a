"""CronMeetCal: open video meetings from cron, driven by today's calendar."""

__version__ = "1.0.0"
