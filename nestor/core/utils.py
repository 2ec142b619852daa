"""
Core Utilities.

Shared utility functions used across the package.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application are timezone-naive and assumed
    to be UTC, including the moments cron schedules are matched against.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_now() -> datetime:
    """
    Return current local wall-clock time as timezone-naive datetime.

    Cron schedules are matched against this, so "0 9 * * *" fires at 09:00
    on the machine running the monitor.
    """
    return datetime.now()
