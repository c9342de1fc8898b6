from datetime import datetime, timedelta

import pytest
import pytz

from tracker.streak import compute_streak, days_between

NOW = pytz.utc.localize(datetime(2024, 5, 10, 15, 30))


def test_same_day_keeps_streak():
    earlier = NOW.replace(hour=1)
    result = compute_streak(4, earlier, NOW, 'UTC')
    assert result.streak == 4
    assert result.last_active_date == earlier
    assert result.changed is False


def test_yesterday_increments_by_one():
    result = compute_streak(4, NOW - timedelta(days=1), NOW, 'UTC')
    assert result.streak == 5
    assert result.last_active_date == NOW
    assert result.changed is True


def test_calendar_day_not_24_hours():
    # 23:59 yesterday to 00:01 today is one calendar day
    late = pytz.utc.localize(datetime(2024, 5, 9, 23, 59))
    early = pytz.utc.localize(datetime(2024, 5, 10, 0, 1))
    assert compute_streak(2, late, early, 'UTC').streak == 3


@pytest.mark.parametrize("days", [2, 3, 30])
def test_gap_resets_to_one(days):
    result = compute_streak(12, NOW - timedelta(days=days), NOW, 'UTC')
    assert result.streak == 1
    assert result.last_active_date == NOW


def test_future_last_active_resets_to_one():
    result = compute_streak(7, NOW + timedelta(days=2), NOW, 'UTC')
    assert result.streak == 1


@pytest.mark.parametrize("last_active", [None, "", "not-a-date", 42])
def test_missing_or_malformed_date_counts_as_first_activity(last_active):
    result = compute_streak(9, last_active, NOW, 'UTC')
    assert result.streak == 1
    assert result.last_active_date == NOW
    assert result.changed is True


def test_iso_string_last_active():
    result = compute_streak(1, "2024-05-09T08:00:00Z", NOW, 'UTC')
    assert result.streak == 2


def test_days_follow_configured_timezone():
    last = pytz.utc.localize(datetime(2024, 3, 10, 23, 30))
    now = pytz.utc.localize(datetime(2024, 3, 11, 0, 30))
    assert days_between(last, now, 'UTC') == 1
    # Both instants fall on the evening of March 10 in Denver
    assert days_between(last, now, 'America/Denver') == 0
    assert compute_streak(3, last, now, 'America/Denver').streak == 3


def test_days_between_unparseable():
    assert days_between("garbage", NOW, 'UTC') is None
