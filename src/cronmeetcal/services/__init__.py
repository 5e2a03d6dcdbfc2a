"""Collaborators that talk to the calendar, crontab and filesystem."""
