"""
Activity Service

Applies the streak calculator whenever a user does something that counts as
activity (logging in, saving a focus session).

The read-compute-write cycle is guarded by the user's version counter: if
another request updated the user in between, the write is rejected and the
cycle starts again from a fresh read, so concurrent activity never loses an
increment.
"""

import logging

from flask import current_app, has_app_context

from config.database import get_user, update_user_streak
from tracker.errors import ConflictError, StorageError
from tracker.streak import compute_streak
from utils.dates import now_utc

logger = logging.getLogger(__name__)

STREAK_UPDATE_ATTEMPTS = 3


def _app_timezone():
    if has_app_context():
        return current_app.config.get('APP_TIMEZONE')
    return None


def record_activity(user_id, now=None, tz=None):
    """
    Update the user's streak for an activity happening now.

    Args:
        user_id (int): Active user
        now (datetime, optional): Activity time (default: server time)
        tz (str, optional): Timezone for calendar days (default: app setting)

    Returns:
        int: The user's streak after the activity

    Raises:
        ConflictError: If every attempt lost a race with another writer
    """
    now = now or now_utc()
    tz = tz or _app_timezone()

    for attempt in range(1, STREAK_UPDATE_ATTEMPTS + 1):
        user = get_user(user_id)
        result = compute_streak(user['streak'], user['last_active_date'], now, tz)
        if not result.changed:
            return user['streak']

        try:
            update_user_streak(
                user_id,
                result.streak,
                result.last_active_date,
                expected_version=user['version'],
            )
            return result.streak
        except ConflictError:
            logger.warning(f"Streak update conflict for user {user_id} (attempt {attempt})")

    raise ConflictError(f"Could not update streak for user {user_id}")


def record_session_activity(user_id, now=None, tz=None):
    """
    Count an already stored focus session towards the streak.

    The session is committed before this runs, so a failed streak write is
    logged rather than raised: reporting an error would make the client
    retry and store the session twice.

    Returns:
        int or None: The streak after the activity, the stored streak if
        the update failed, or None if the user could not be read either
    """
    try:
        return record_activity(user_id, now, tz)
    except (ConflictError, StorageError) as e:
        logger.error(f"Streak not updated after saving session for user {user_id}: {e.message}")

    try:
        return get_user(user_id)['streak']
    except StorageError:
        return None
