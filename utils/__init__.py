"""
Utility modules for the productivity tracker.
"""

from .dates import coerce_datetime, local_date, local_midnight, now_utc

__all__ = ['coerce_datetime', 'local_date', 'local_midnight', 'now_utc']
