"""Data models for meetings, jobs and runs."""
