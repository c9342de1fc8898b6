"""
Streak Calculator

A streak is the number of consecutive calendar days with at least one
qualifying activity (a login or a saved focus session). Calendar days are
taken in the application timezone using server time only.
"""

from typing import NamedTuple, Optional
from datetime import datetime

from utils.dates import coerce_datetime, get_timezone, local_date


class StreakUpdate(NamedTuple):
    streak: int
    last_active_date: Optional[datetime]
    changed: bool


def days_between(last_active_date, now, tz=None):
    """
    Whole calendar days from `last_active_date` to `now`.

    Returns None when the last active date is missing or unparseable.
    """
    zone = get_timezone(tz)
    last_day = local_date(last_active_date, zone)
    if last_day is None:
        return None
    return (local_date(now, zone) - last_day).days


def compute_streak(streak, last_active_date, now, tz=None):
    """
    Derive the streak after an activity at `now`.

    Args:
        streak (int): Current streak count
        last_active_date: Previous activity timestamp (datetime or ISO string)
        now (datetime): Time of the new activity
        tz (str, optional): Timezone name (default: APP_TIMEZONE)

    Returns:
        StreakUpdate: New streak, new last active timestamp, and whether
        anything changed
    """
    now = coerce_datetime(now)
    days_diff = days_between(last_active_date, now, tz)

    if days_diff == 0:
        # Same calendar day
        return StreakUpdate(streak, coerce_datetime(last_active_date), False)

    if days_diff == 1:
        return StreakUpdate((streak or 0) + 1, now, True)

    # Gap of two or more days, clock skew, or no usable prior activity
    return StreakUpdate(1, now, True)
