"""
Date Utilities

Timezone handling for the tracker. Timestamps are stored as naive UTC in the
database, handled as aware UTC in Python, and bucketed into calendar days in
the configured application timezone.
"""

from datetime import datetime, date, time
import pytz

from config.settings import APP_TIMEZONE


def get_timezone(name=None):
    """
    Resolve a timezone name to a pytz timezone.

    Args:
        name (str, optional): Olson timezone name (default: APP_TIMEZONE)

    Returns:
        pytz timezone, falling back to UTC for unknown names
    """
    if name is None:
        name = APP_TIMEZONE
    if not isinstance(name, str):
        # Already a tzinfo
        return name
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        return pytz.utc


def now_utc():
    """Current server time as an aware UTC datetime."""
    return datetime.now(pytz.utc)


def coerce_datetime(value):
    """
    Convert a datetime, date or ISO-8601 string to an aware UTC datetime.

    Naive datetimes are assumed to be UTC. Anything that cannot be parsed
    returns None instead of raising.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        return pytz.utc.localize(dt)
    return dt.astimezone(pytz.utc)


def local_date(value, tz=None):
    """Calendar date of a timestamp in the given (or application) timezone."""
    dt = coerce_datetime(value)
    if dt is None:
        return None
    return dt.astimezone(get_timezone(tz)).date()


def local_midnight(now, tz=None):
    """
    Start of the calendar day containing `now`, as an aware UTC datetime.
    """
    zone = get_timezone(tz)
    day = local_date(now, zone)
    midnight = zone.localize(datetime.combine(day, time.min))
    return midnight.astimezone(pytz.utc)


def to_storage(value):
    """Aware (or naive UTC) datetime to the naive UTC form stored in the DB."""
    dt = coerce_datetime(value)
    if dt is None:
        return None
    return dt.replace(tzinfo=None)


def from_storage(value):
    """Naive UTC datetime from the DB to an aware UTC datetime."""
    if value is None:
        return None
    return pytz.utc.localize(value) if value.tzinfo is None else value


def isoformat(value):
    """Serialize a datetime or date for JSON responses."""
    if value is None:
        return None
    return value.isoformat()
