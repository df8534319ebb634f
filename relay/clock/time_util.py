"""
Clock utilities for Relay Station.

Provides wall-clock reads in whole epoch seconds, day-local clock labels,
and calendar year derivation without a calendar library.
"""

import logging
import time
from typing import Optional

from relay.constants import SECONDS_PER_DAY

logger = logging.getLogger(__name__)

# Days in a 400-year Gregorian era
DAYS_PER_ERA = 146_097

# Offset from 0000-03-01 to 1970-01-01
UNIX_EPOCH_DAY_OFFSET = 719_468


def now_seconds() -> int:
    """
    Get current wall-clock time in whole seconds since the Unix epoch.

    A clock read that fails, or reports a time before the epoch, yields 0.

    Returns:
        Epoch seconds, truncated
    """
    try:
        seconds = int(time.time())
    except (OSError, OverflowError, ValueError) as e:
        logger.warning(f"[CLOCK] Clock read failed, using epoch 0: {e}")
        return 0
    return seconds if seconds > 0 else 0


def clock_label(seconds: int) -> str:
    """
    Render epoch seconds as a day-wrapped HH:MM:SS label (UTC).

    Args:
        seconds: Epoch seconds

    Returns:
        Zero-padded HH:MM:SS string
    """
    seconds_today = seconds % SECONDS_PER_DAY
    hour = seconds_today // 3_600
    minute = (seconds_today % 3_600) // 60
    second = seconds_today % 60
    return f"{hour:02d}:{minute:02d}:{second:02d}"


def year_from_unix_days(days_since_epoch: int) -> int:
    """
    Convert a count of days since 1970-01-01 to a proleptic Gregorian year.

    Civil-from-days algorithm: shift the epoch to 0000-03-01 so the leap
    day falls at the end of each computational year, split into 400-year
    eras, then resolve year-of-era and month.

    Args:
        days_since_epoch: Whole days since the Unix epoch (may be negative)

    Returns:
        Calendar year
    """
    z = days_since_epoch + UNIX_EPOCH_DAY_OFFSET
    era = z // DAYS_PER_ERA  # floor division handles days before the epoch
    doe = z - era * DAYS_PER_ERA  # [0, 146096]
    yoe = (doe - doe // 1_460 + doe // 36_524 - doe // 146_096) // 365  # [0, 399]
    year = yoe + era * 400
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)  # [0, 365]
    mp = (5 * doy + 2) // 153  # March = 0
    month = mp + 3 if mp < 10 else mp - 9

    if month <= 2:
        year += 1
    return year


def current_year(now: Optional[int] = None) -> int:
    """
    Get the current calendar year.

    Args:
        now: Epoch seconds to use instead of reading the clock

    Returns:
        Calendar year for the given (or current) time
    """
    if now is None:
        now = now_seconds()
    return year_from_unix_days(now // SECONDS_PER_DAY)
