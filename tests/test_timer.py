from datetime import datetime, timedelta

import pytest
import pytz

from config import settings
from conftest import FakeClock
from tracker.errors import ValidationError
from tracker.timer import (
    FocusTimer,
    TimerState,
    TimerStatus,
    complete,
    new_timer,
    parse_custom_minutes,
    pause,
    quick_focus,
    reset,
    set_duration,
    start,
    sync,
    tick,
)

T0 = pytz.utc.localize(datetime(2024, 5, 1, 9, 0, 0))


def test_default_timer_is_idle_for_25_minutes():
    state = new_timer()
    assert state.status is TimerStatus.IDLE
    assert state.remaining_seconds == 1500
    assert state.display() == "25:00"


def test_1500_ticks_complete_exactly_one_session():
    state = start(new_timer(), T0)
    sessions = []
    for _ in range(1500):
        state, session = tick(state)
        if session is not None:
            sessions.append(session)

    assert state.status is TimerStatus.IDLE
    assert state.remaining_seconds == 1500
    assert len(sessions) == 1
    assert sessions[0].duration == 25
    assert sessions[0].task == "Focus Session"
    assert sessions[0].start_time == T0


def test_ticks_before_zero_emit_nothing():
    state = start(new_timer(1), T0)
    for _ in range(59):
        state, session = tick(state)
        assert session is None
    assert state.status is TimerStatus.RUNNING
    assert state.display() == "0:01"


def test_pause_after_ten_ticks_then_reset_restores_full_duration():
    state = start(new_timer(), T0)
    for _ in range(10):
        state, session = tick(state)
        assert session is None
    state, session = pause(state)
    assert session is None
    assert state.remaining_seconds == 1490

    state = reset(state)
    assert state.status is TimerStatus.IDLE
    assert state.remaining_seconds == 1500
    assert state.start_time is None


def test_pause_twice_is_same_as_once():
    state = start(new_timer(), T0)
    state, _ = tick(state)
    once, _ = pause(state)
    twice, _ = pause(once)
    assert twice == once
    assert twice.status is TimerStatus.PAUSED


def test_start_while_running_is_noop():
    state = start(new_timer(), T0)
    assert start(state, T0 + timedelta(minutes=5)) is state


def test_invalid_transitions_are_noops():
    idle = new_timer()
    assert pause(idle).state is idle
    assert tick(idle).state is idle
    assert tick(idle).session is None
    assert complete(idle, T0).session is None

    paused = pause(start(idle, T0)).state
    assert tick(paused).state is paused


def test_paused_timer_does_not_tick():
    state = pause(start(new_timer(), T0)).state
    for _ in range(5):
        state, _ = tick(state)
    assert state.remaining_seconds == 1500


def test_resume_keeps_original_start_time():
    state = start(new_timer(), T0)
    for _ in range(10):
        state, _ = tick(state)
    state, _ = pause(state)
    state = start(state, T0 + timedelta(minutes=3))

    assert state.status is TimerStatus.RUNNING
    assert state.start_time == T0
    assert state.banked_seconds == 10


def test_tick_catches_up_with_wall_clock():
    state = start(new_timer(), T0)
    # Host suspended ticking for ten minutes
    state, session = tick(state, T0 + timedelta(minutes=10))
    assert session is None
    assert state.elapsed_seconds == 600
    assert state.display() == "15:00"


def test_wall_clock_excludes_paused_time():
    state = start(new_timer(), T0)
    state, _ = tick(state, T0 + timedelta(seconds=100))
    state, _ = pause(state)
    state = start(state, T0 + timedelta(hours=1))
    state, _ = tick(state, T0 + timedelta(hours=1, seconds=5))
    assert state.elapsed_seconds == 105


def test_pause_catches_up_with_wall_clock():
    state = start(new_timer(), T0)
    state, _ = tick(state)
    state, session = pause(state, T0 + timedelta(minutes=10))

    assert session is None
    assert state.status is TimerStatus.PAUSED
    assert state.remaining_seconds == 900
    assert state.banked_seconds == 600


def test_pause_of_overdue_timer_completes_it():
    state = start(new_timer(1, task="Stretch"), T0)
    state, session = pause(state, T0 + timedelta(minutes=3))

    assert state.status is TimerStatus.IDLE
    assert session.task == "Stretch"
    assert session.duration == 1
    assert session.end_time == T0 + timedelta(minutes=3)


def test_sync_completes_overdue_timer():
    state = start(new_timer(1, task="Write report"), T0)
    end = T0 + timedelta(minutes=5)
    state, session = sync(state, end)

    assert state.status is TimerStatus.IDLE
    assert session.task == "Write report"
    assert session.duration == 1
    assert session.end_time == end


def test_completed_session_payload():
    state = start(new_timer(1), T0)
    _, session = sync(state, T0 + timedelta(seconds=60))
    payload = session.to_payload()
    assert payload == {
        'task': 'Focus Session',
        'duration': 1,
        'start_time': '2024-05-01T09:00:00+00:00',
        'end_time': '2024-05-01T09:01:00+00:00',
    }


def test_quick_focus_preset():
    state = quick_focus()
    assert state.total_minutes == 25
    assert state.task == "Quick Focus"


def test_set_duration_stops_timer():
    state = start(new_timer(), T0)
    state = set_duration(state, 45)
    assert state.status is TimerStatus.IDLE
    assert state.display() == "45:00"


@pytest.mark.parametrize("minutes", [0, 121, -5, 2.5, True])
def test_set_duration_rejects_out_of_range(minutes):
    with pytest.raises(ValidationError):
        set_duration(TimerState(), minutes)


def test_parse_custom_minutes():
    assert parse_custom_minutes("45") == 45
    assert parse_custom_minutes(" 120 ") == 120
    for raw in ("abc", "", None, "0", "121"):
        with pytest.raises(ValidationError):
            parse_custom_minutes(raw)


def test_progress():
    state = start(new_timer(1), T0)
    for _ in range(15):
        state, _ = tick(state)
    assert state.progress() == 0.25


def test_focus_timer_run_completes():
    clock = FakeClock(T0)
    completed = []
    timer = FocusTimer(minutes=1, task="Inbox zero", clock=clock, sleep=clock.sleep,
                       on_complete=completed.append)

    session = timer.run()

    assert session is not None
    assert completed == [session]
    assert session.duration == 1
    assert session.start_time == T0
    assert session.end_time == T0 + timedelta(seconds=60)
    assert timer.state.status is TimerStatus.IDLE


def test_focus_timer_run_stops_when_paused():
    clock = FakeClock(T0)
    timer = FocusTimer(minutes=5, clock=clock, sleep=clock.sleep)

    def pause_after_ten(state):
        if state.elapsed_seconds == 10:
            timer.pause()

    timer.on_tick = pause_after_ten
    assert timer.run() is None
    assert timer.state.status is TimerStatus.PAUSED
    assert timer.state.remaining_seconds == 290

    # Resuming continues from where it stopped
    timer.on_tick = None
    session = timer.run()
    assert session.duration == 5
    assert session.start_time == T0


def test_focus_timer_pause_counts_suspended_time():
    clock = FakeClock(T0)
    timer = FocusTimer(minutes=25, clock=clock, sleep=clock.sleep)
    timer.start()

    # Host suspended for ten minutes without ticking
    clock.now = T0 + timedelta(minutes=10)
    timer.pause()

    assert timer.state.status is TimerStatus.PAUSED
    assert timer.state.remaining_seconds == 900


def test_focus_timer_pause_after_overdue_suspend_returns_session():
    clock = FakeClock(T0)
    completed = []
    timer = FocusTimer(minutes=5, clock=clock, sleep=clock.sleep, on_complete=completed.append)

    def suspend_then_pause(state):
        if state.elapsed_seconds == 10:
            clock.now += timedelta(minutes=10)
            timer.pause()

    timer.on_tick = suspend_then_pause
    session = timer.run()

    assert session is not None
    assert completed == [session]
    assert session.duration == 5
    assert session.end_time == T0 + timedelta(minutes=10, seconds=10)
    assert timer.state.status is TimerStatus.IDLE


def test_default_minutes_follow_setting(monkeypatch):
    monkeypatch.setattr(settings, 'DEFAULT_FOCUS_MINUTES', 45)
    assert new_timer().total_minutes == 45
    assert FocusTimer().state.remaining_seconds == 45 * 60
