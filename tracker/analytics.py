"""
Analytics Aggregator

Summary statistics recomputed from a user's full task and focus session
collections on every request. Records may be dicts (as returned by the store)
or objects with the same attribute names. Timestamps that cannot be parsed
are skipped.
"""

from dataclasses import dataclass
from datetime import timedelta

from utils.dates import coerce_datetime, local_midnight


def _field(record, name, default=None):
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def _minutes(record):
    try:
        return int(_field(record, 'duration', 0) or 0)
    except (TypeError, ValueError):
        return 0


def productivity_score(completed, total):
    """Percentage of completed tasks, rounded half up. 0 when there are no tasks."""
    if total <= 0:
        return 0
    return int(100 * completed / total + 0.5)


@dataclass
class AnalyticsSummary:
    tasks_total: int = 0
    tasks_completed: int = 0
    tasks_pending: int = 0
    today_completed: int = 0
    focus_minutes_total: int = 0
    focus_hours_total: int = 0
    today_focus_minutes: int = 0
    week_focus_minutes: int = 0
    sessions_count: int = 0
    streak: int = 0
    productivity_score: int = 0

    def to_dict(self):
        return {
            'tasks': {
                'total': self.tasks_total,
                'completed': self.tasks_completed,
                'pending': self.tasks_pending,
                'today_completed': self.today_completed,
            },
            'focus': {
                'total_minutes': self.focus_minutes_total,
                'total_hours': self.focus_hours_total,
                'today_minutes': self.today_focus_minutes,
                'week_minutes': self.week_focus_minutes,
                'sessions_count': self.sessions_count,
            },
            'streak': self.streak,
            'productivity_score': self.productivity_score,
        }


def build_analytics(tasks, sessions, now, streak=0, tz=None):
    """
    Aggregate a user's tasks and focus sessions.

    Args:
        tasks (list): Task records (completed, completed_at)
        sessions (list): Focus session records (duration, date)
        now (datetime): Reference time
        streak (int): The user's stored streak
        tz (str, optional): Timezone for "today" (default: APP_TIMEZONE)

    Returns:
        AnalyticsSummary
    """
    now = coerce_datetime(now)
    today = local_midnight(now, tz)
    week_ago = now - timedelta(days=7)

    tasks = list(tasks)
    sessions = list(sessions)

    completed = [t for t in tasks if _field(t, 'completed')]
    today_completed = 0
    for task in completed:
        completed_at = coerce_datetime(_field(task, 'completed_at'))
        if completed_at is not None and today <= completed_at < now:
            today_completed += 1

    total_minutes = 0
    today_minutes = 0
    week_minutes = 0
    for session in sessions:
        minutes = _minutes(session)
        total_minutes += minutes
        session_date = coerce_datetime(_field(session, 'date'))
        if session_date is None:
            continue
        if session_date >= today:
            today_minutes += minutes
        if session_date >= week_ago:
            week_minutes += minutes

    return AnalyticsSummary(
        tasks_total=len(tasks),
        tasks_completed=len(completed),
        tasks_pending=len(tasks) - len(completed),
        today_completed=today_completed,
        focus_minutes_total=total_minutes,
        focus_hours_total=total_minutes // 60,
        today_focus_minutes=today_minutes,
        week_focus_minutes=week_minutes,
        sessions_count=len(sessions),
        streak=streak or 0,
        productivity_score=productivity_score(len(completed), len(tasks)),
    )
