"""Clock and calendar helpers."""

from .time_util import clock_label, current_year, now_seconds, year_from_unix_days

__all__ = ["clock_label", "current_year", "now_seconds", "year_from_unix_days"]
