from datetime import datetime, timedelta
from types import SimpleNamespace

import pytz

from tracker.analytics import build_analytics, productivity_score

NOW = pytz.utc.localize(datetime(2024, 5, 10, 15, 0))


def task(completed=False, completed_at=None):
    return {'completed': completed, 'completed_at': completed_at}


def session(duration, date):
    return {'duration': duration, 'date': date}


def test_empty_collections():
    summary = build_analytics([], [], NOW, tz='UTC')
    assert summary.productivity_score == 0
    assert summary.tasks_total == 0
    assert summary.focus_minutes_total == 0
    assert summary.sessions_count == 0


def test_three_of_four_completed_scores_75():
    tasks = [task(True, NOW - timedelta(days=3)) for _ in range(3)] + [task()]
    summary = build_analytics(tasks, [], NOW, tz='UTC')
    assert summary.tasks_total == 4
    assert summary.tasks_completed == 3
    assert summary.tasks_pending == 1
    assert summary.productivity_score == 75


def test_productivity_score_rounds_half_up():
    assert productivity_score(1, 8) == 13
    assert productivity_score(2, 3) == 67
    assert productivity_score(1, 3) == 33
    assert productivity_score(0, 0) == 0


def test_today_completed_window():
    midnight = pytz.utc.localize(datetime(2024, 5, 10))
    tasks = [
        task(True, midnight),                        # counts
        task(True, NOW - timedelta(minutes=5)),      # counts
        task(True, midnight - timedelta(seconds=1)),  # yesterday
        task(True, NOW + timedelta(minutes=5)),      # not before now
        task(True, None),                            # no timestamp
        task(False, None),
    ]
    summary = build_analytics(tasks, [], NOW, tz='UTC')
    assert summary.today_completed == 2
    assert summary.tasks_completed == 5


def test_focus_minutes():
    sessions = [
        session(25, NOW - timedelta(hours=1)),
        session(50, NOW - timedelta(days=3)),
        session(50, NOW - timedelta(days=10)),
    ]
    summary = build_analytics([], sessions, NOW, tz='UTC')
    assert summary.focus_minutes_total == 125
    assert summary.focus_hours_total == 2
    assert summary.today_focus_minutes == 25
    assert summary.week_focus_minutes == 75
    assert summary.sessions_count == 3


def test_today_uses_configured_timezone():
    # 02:00 UTC on May 10 is the evening of May 9 in New York
    sessions = [session(30, pytz.utc.localize(datetime(2024, 5, 10, 2, 0)))]
    assert build_analytics([], sessions, NOW, tz='UTC').today_focus_minutes == 30
    assert build_analytics([], sessions, NOW, tz='America/New_York').today_focus_minutes == 0


def test_malformed_dates_are_skipped():
    sessions = [session(20, "not-a-date"), session(10, (NOW - timedelta(hours=2)).isoformat())]
    tasks = [task(True, "yesterday-ish")]
    summary = build_analytics(tasks, sessions, NOW, tz='UTC')
    assert summary.focus_minutes_total == 30
    assert summary.today_focus_minutes == 10
    assert summary.today_completed == 0


def test_accepts_objects():
    tasks = [SimpleNamespace(completed=True, completed_at=NOW - timedelta(hours=1))]
    sessions = [SimpleNamespace(duration=15, date=NOW)]
    summary = build_analytics(tasks, sessions, NOW, streak=4, tz='UTC')
    assert summary.today_completed == 1
    assert summary.today_focus_minutes == 15
    assert summary.streak == 4


def test_to_dict_shape():
    summary = build_analytics([task(True, NOW - timedelta(hours=1))], [session(60, NOW)], NOW, streak=2, tz='UTC')
    assert summary.to_dict() == {
        'tasks': {'total': 1, 'completed': 1, 'pending': 0, 'today_completed': 1},
        'focus': {
            'total_minutes': 60,
            'total_hours': 1,
            'today_minutes': 60,
            'week_minutes': 60,
            'sessions_count': 1,
        },
        'streak': 2,
        'productivity_score': 100,
    }
