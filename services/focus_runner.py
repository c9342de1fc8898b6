"""
Focus Runner

Runs a focus timer in the terminal for a registered user and saves the
finished session to the database, counting it towards the user's streak.

Ctrl+C pauses the countdown; nothing is saved unless the countdown reaches
zero.
"""

import sys
import time
import logging
import signal
from pathlib import Path
from dotenv import load_dotenv

# Load env vars
load_dotenv()

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database import create_session, get_user_by_email, init_database
from tracker.errors import NotFound
from tracker.timer import FocusTimer, TimerStatus
from utils.dates import now_utc
from webapp.services.activity_service import record_session_activity

logger = logging.getLogger(__name__)

# Log progress once per this many seconds
PROGRESS_INTERVAL = 60


def save_completed_session(user_id, completed):
    """
    Persist a completed timer session and update the streak.

    Returns:
        tuple: (session dict, new streak)
    """
    saved = create_session(
        user_id,
        task=completed.task,
        duration=completed.duration,
        start_time=completed.start_time,
        end_time=completed.end_time,
    )
    streak = record_session_activity(user_id)
    logger.info(f"Saved {completed.duration} minute session '{completed.task}' (streak: {streak})")
    return saved, streak


def run_focus_session(email, minutes=None, task=None, clock=now_utc, sleep=time.sleep):
    """
    Run one focus countdown for the user registered under `email`.

    Args:
        email (str): Registered user's email
        minutes (int, optional): Countdown length, 1-120 (default: DEFAULT_FOCUS_MINUTES)
        task (str, optional): Session label
        clock, sleep: Injectable time sources

    Returns:
        dict or None: The saved session, or None if the timer was stopped

    Raises:
        NotFound: If no user is registered under `email`
    """
    init_database()
    user = get_user_by_email(email)
    if user is None:
        raise NotFound(f"No user registered with email {email}")

    def report(state):
        if state.elapsed_seconds % PROGRESS_INTERVAL == 0:
            logger.info(f"{state.display()} remaining")

    timer = FocusTimer(minutes=minutes, task=task, clock=clock, sleep=sleep, on_tick=report)

    def signal_handler(signum, frame):
        """Pause the countdown on shutdown signals."""
        logger.info("Received stop signal. Pausing timer...")
        timer.pause()

    previous_int = signal.signal(signal.SIGINT, signal_handler)
    previous_term = signal.signal(signal.SIGTERM, signal_handler)

    logger.info(f"Focusing on '{timer.state.task}' for {timer.state.total_minutes} minutes")
    logger.info("Press Ctrl+C to stop")

    try:
        completed = timer.run()
    finally:
        signal.signal(signal.SIGINT, previous_int)
        signal.signal(signal.SIGTERM, previous_term)

    if completed is None:
        if timer.state.status is TimerStatus.PAUSED:
            logger.info(f"Timer stopped with {timer.state.display()} remaining; session not saved")
        return None

    saved, _ = save_completed_session(user['user_id'], completed)
    return saved
