"""
Focus Timer

Countdown state machine for a single focus session.

The timer state is an explicit immutable object. Every transition is a pure
function taking a state (and the current time where it matters) and returning
a new state, so several timers can coexist without sharing anything.
Transitions that do not apply to the current status return the state
unchanged instead of raising.

States:
    IDLE    - configured, not counting
    RUNNING - counting down, one tick per elapsed second
    PAUSED  - counting frozen, resumable with start()
"""

import math
import time
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import NamedTuple, Optional

from config import settings
from tracker.errors import ValidationError
from utils.dates import coerce_datetime, isoformat, now_utc

DEFAULT_MINUTES = 25
MIN_MINUTES = 1
MAX_MINUTES = 120
PRESET_MINUTES = (15, 25, 45, 60)

DEFAULT_TASK = 'Focus Session'
QUICK_FOCUS_TASK = 'Quick Focus'
QUICK_FOCUS_MINUTES = 25


class TimerStatus(str, Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    PAUSED = 'paused'


@dataclass(frozen=True)
class CompletedSession:
    """Record emitted when a countdown reaches zero."""
    task: str
    duration: int  # minutes
    start_time: datetime
    end_time: datetime

    def to_payload(self):
        """Request body for POST /api/sessions."""
        return {
            'task': self.task,
            'duration': self.duration,
            'start_time': isoformat(self.start_time),
            'end_time': isoformat(self.end_time),
        }


@dataclass(frozen=True)
class TimerState:
    total_seconds: int = DEFAULT_MINUTES * 60
    elapsed_seconds: int = 0
    status: TimerStatus = TimerStatus.IDLE
    task: str = DEFAULT_TASK
    # First start of the current run, kept across pause/resume
    start_time: Optional[datetime] = None
    # Wall-clock anchor of the last start() and the elapsed count at that moment
    resumed_at: Optional[datetime] = None
    banked_seconds: int = 0

    @property
    def remaining_seconds(self):
        return max(0, self.total_seconds - self.elapsed_seconds)

    @property
    def total_minutes(self):
        return self.total_seconds // 60

    @property
    def is_running(self):
        return self.status is TimerStatus.RUNNING

    def display(self):
        """Remaining time as M:SS."""
        minutes, seconds = divmod(self.remaining_seconds, 60)
        return f"{minutes}:{seconds:02d}"

    def progress(self):
        """Fraction of the countdown already elapsed, 0.0 to 1.0."""
        if not self.total_seconds:
            return 0.0
        return min(1.0, self.elapsed_seconds / self.total_seconds)


class TickResult(NamedTuple):
    state: TimerState
    session: Optional[CompletedSession] = None


def _check_minutes(minutes):
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise ValidationError(f"Timer minutes must be a whole number, got {minutes!r}")
    if not MIN_MINUTES <= minutes <= MAX_MINUTES:
        raise ValidationError(f"Timer minutes must be between {MIN_MINUTES} and {MAX_MINUTES}")


def _now(now):
    if now is None:
        return now_utc()
    return coerce_datetime(now)


def _wall_elapsed(state, now):
    """Elapsed seconds according to the wall clock since the last start()."""
    if state.resumed_at is None:
        return state.elapsed_seconds
    seconds = (now - state.resumed_at).total_seconds()
    return state.banked_seconds + max(0, int(math.floor(seconds)))


def new_timer(minutes=None, task=None):
    """Create an idle timer configured for `minutes` (default: DEFAULT_FOCUS_MINUTES setting)."""
    if minutes is None:
        minutes = settings.DEFAULT_FOCUS_MINUTES
    _check_minutes(minutes)
    return TimerState(total_seconds=minutes * 60, task=task or DEFAULT_TASK)


def quick_focus():
    """Idle timer for the fixed-length quick focus widget."""
    return new_timer(QUICK_FOCUS_MINUTES, QUICK_FOCUS_TASK)


def parse_custom_minutes(raw):
    """
    Parse a user-entered custom duration.

    Args:
        raw: Value typed by the user (string or number)

    Returns:
        int: Minutes in the allowed range

    Raises:
        ValidationError: If the value is not a whole number in range
    """
    try:
        minutes = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid number of minutes: {raw!r}") from None
    _check_minutes(minutes)
    return minutes


def set_duration(state, minutes):
    """Reconfigure the countdown. Always stops the timer."""
    _check_minutes(minutes)
    return TimerState(total_seconds=minutes * 60, task=state.task)


def set_task(state, task):
    return replace(state, task=(task or '').strip() or DEFAULT_TASK)


def start(state, now=None):
    """IDLE or PAUSED -> RUNNING. No-op while already running."""
    if state.status is TimerStatus.RUNNING:
        return state
    now = _now(now)
    return replace(
        state,
        status=TimerStatus.RUNNING,
        start_time=state.start_time or now,
        resumed_at=now,
        banked_seconds=state.elapsed_seconds,
    )


def pause(state, now=None):
    """
    RUNNING -> PAUSED, freezing the remaining time. No-op otherwise.

    When `now` is given the elapsed count first catches up with the wall
    clock. If that reaches zero the countdown completes instead of pausing
    and the result carries the session.
    """
    if state.status is not TimerStatus.RUNNING:
        return TickResult(state)
    if now is not None:
        state, session = sync(state, now)
        if session is not None:
            return TickResult(state, session)
    return TickResult(replace(state, status=TimerStatus.PAUSED, resumed_at=None,
                              banked_seconds=state.elapsed_seconds))


def reset(state):
    """Any state -> IDLE with the full configured duration."""
    return TimerState(total_seconds=state.total_seconds, task=state.task)


def complete(state, now=None):
    """
    Finish a running countdown.

    Emits the completed session and returns the timer to IDLE.
    """
    if state.status is not TimerStatus.RUNNING:
        return TickResult(state)
    now = _now(now)
    session = CompletedSession(
        task=state.task,
        duration=state.total_minutes,
        start_time=state.start_time or now,
        end_time=now,
    )
    return TickResult(reset(state), session)


def _advance(state, elapsed, now):
    elapsed = min(elapsed, state.total_seconds)
    advanced = replace(state, elapsed_seconds=elapsed)
    if elapsed >= state.total_seconds:
        return complete(advanced, now)
    return TickResult(advanced)


def tick(state, now=None):
    """
    Advance a running timer by one second.

    When `now` is given the elapsed count also catches up with the wall
    clock, so a host that skipped ticks (sleep, suspended tab) never shows
    more time remaining than has really passed.
    """
    if state.status is not TimerStatus.RUNNING:
        return TickResult(state)
    elapsed = state.elapsed_seconds + 1
    if now is not None:
        now = coerce_datetime(now)
        elapsed = max(elapsed, _wall_elapsed(state, now))
    return _advance(state, elapsed, now)


def sync(state, now):
    """Re-derive elapsed time purely from the wall clock without ticking."""
    if state.status is not TimerStatus.RUNNING:
        return TickResult(state)
    now = coerce_datetime(now)
    elapsed = max(state.elapsed_seconds, _wall_elapsed(state, now))
    return _advance(state, elapsed, now)


class FocusTimer:
    """
    Owns the timer state for one UI context and drives its tick loop.

    The loop is cooperative: it sleeps one second between ticks and checks
    the state after every sleep, so pause() or reset() called from a
    callback or signal handler stops it immediately.
    """

    def __init__(self, minutes=None, task=None, clock=now_utc, sleep=time.sleep,
                 on_tick=None, on_complete=None):
        self.state = new_timer(minutes, task)
        self._clock = clock
        self._sleep = sleep
        self._finished = None
        self.on_tick = on_tick
        self.on_complete = on_complete

    def start(self):
        self.state = start(self.state, self._clock())

    def pause(self):
        """Pause at the wall-clock position; completes the countdown if it is overdue."""
        result = pause(self.state, self._clock())
        self.state = result.state
        if result.session is not None:
            self._finish(result.session)

    def reset(self):
        self.state = reset(self.state)

    def set_duration(self, minutes):
        self.state = set_duration(self.state, minutes)

    def _finish(self, session):
        self._finished = session
        if self.on_complete:
            self.on_complete(session)

    def run(self):
        """
        Start (or resume) and tick until the countdown ends.

        Returns:
            CompletedSession if the countdown finished, None if it was
            paused or reset first
        """
        self._finished = None
        self.start()
        while self.state.is_running:
            self._sleep(1)
            if not self.state.is_running:
                break
            result = tick(self.state, self._clock())
            self.state = result.state
            if self.on_tick:
                self.on_tick(self.state)
            if result.session is not None:
                self._finish(result.session)
        return self._finished
