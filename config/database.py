"""
Database Configuration and Management (SQLAlchemy)

Handles database setup, connections, and the user-scoped CRUD operations for
users, tasks, notes and focus sessions.

Every task, note and focus session belongs to exactly one user. All lookups
filter on the owning user_id, so an id owned by someone else behaves exactly
like an id that does not exist (NotFound).
"""

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
import logging
from sqlalchemy import create_engine, select, delete, update, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from config.models import Base, User, Task, Note, FocusSession, PRIORITIES
from config.settings import DATABASE_URL
from tracker.errors import TrackerError, ValidationError, NotFound, ConflictError, StorageError
from utils.dates import coerce_datetime, now_utc, to_storage, from_storage

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = ('theme', 'notifications', 'focus_alerts', 'weather_city')
TASK_FIELDS = ('title', 'description', 'date', 'time', 'priority', 'completed')
NOTE_FIELDS = ('title', 'content')

# SQLAlchemy Engine and Session
engine = None
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def configure_database(database_url=None):
    """
    Bind the session factory to a database.

    Args:
        database_url (str, optional): SQLAlchemy URL (default: DATABASE_URL)

    Returns:
        sqlalchemy.engine.Engine
    """
    global engine

    url = database_url or DATABASE_URL
    connect_args = {}
    if url.startswith('sqlite'):
        # Flask serves requests from several threads
        connect_args['check_same_thread'] = False
        db_file = url[len('sqlite:///'):]
        if db_file and db_file != ':memory:':
            Path(db_file).parent.mkdir(parents=True, exist_ok=True)

    if engine is not None:
        engine.dispose()

    engine = create_engine(url, echo=False, connect_args=connect_args)
    SessionLocal.configure(bind=engine)
    logger.info(f"Database configured: {engine.url.render_as_string(hide_password=True)}")
    return engine


def get_db_session():
    """
    Get a new database session.

    Returns:
        sqlalchemy.orm.Session: Database session
    """
    if engine is None:
        configure_database()
    return SessionLocal()


def init_database():
    """
    Initialize the database with all required tables.
    """
    logger.info("Initializing database...")
    if engine is None:
        configure_database()
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialized successfully!")
    except SQLAlchemyError as e:
        logger.error(f"Error initializing database: {e}")
        raise StorageError() from e


@contextmanager
def session_scope(action):
    """
    Open a session, commit on success and roll back on failure.

    Tracker errors propagate unchanged; database errors are logged and
    surfaced as StorageError.
    """
    session = get_db_session()
    try:
        yield session
        session.commit()
    except TrackerError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Error {action}: {e}")
        session.rollback()
        raise StorageError() from e
    finally:
        session.close()


# ----------------------------------------------------------------------------
# Serialization
# ----------------------------------------------------------------------------

def _user_to_dict(user, include_secret=False):
    data = {
        'user_id': user.user_id,
        'name': user.name,
        'email': user.email,
        'settings': {
            'theme': user.theme,
            'notifications': user.notifications,
            'focus_alerts': user.focus_alerts,
            'weather_city': user.weather_city,
        },
        'streak': user.streak,
        'last_active_date': from_storage(user.last_active_date),
        'last_login': from_storage(user.last_login),
        'created_at': from_storage(user.created_at),
        'version': user.version,
    }
    if include_secret:
        data['password_hash'] = user.password_hash
    return data


def _task_to_dict(task):
    return {
        'task_id': task.task_id,
        'user_id': task.user_id,
        'title': task.title,
        'description': task.description,
        'date': task.date,
        'time': task.time,
        'priority': task.priority,
        'completed': task.completed,
        'created_at': from_storage(task.created_at),
        'completed_at': from_storage(task.completed_at),
    }


def _note_to_dict(note):
    return {
        'note_id': note.note_id,
        'user_id': note.user_id,
        'title': note.title,
        'content': note.content,
        'created_at': from_storage(note.created_at),
        'updated_at': from_storage(note.updated_at),
    }


def _session_to_dict(focus_session):
    return {
        'session_id': focus_session.session_id,
        'user_id': focus_session.user_id,
        'task': focus_session.task,
        'duration': focus_session.duration,
        'start_time': from_storage(focus_session.start_time),
        'end_time': from_storage(focus_session.end_time),
        'date': from_storage(focus_session.date),
    }


# ----------------------------------------------------------------------------
# Validation helpers
# ----------------------------------------------------------------------------

def _require_title(title):
    if title is None or not str(title).strip():
        raise ValidationError("Title is required")
    return str(title).strip()


def _check_priority(priority):
    if priority not in PRIORITIES:
        raise ValidationError(f"Priority must be one of: {', '.join(PRIORITIES)}")
    return priority


def _parse_date(value):
    # Ensure task dates are date objects if passed as string
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        try:
            return datetime.strptime(value, '%Y-%m-%d').date()
        except ValueError:
            raise ValidationError(f"Invalid date format: {value}. Expected YYYY-MM-DD") from None
    return value


def _get_user_row(session, user_id):
    user = session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def _reject_unknown(changes, allowed):
    unknown = sorted(set(changes) - set(allowed))
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(unknown)}")


# ----------------------------------------------------------------------------
# Users
# ----------------------------------------------------------------------------

def create_user(name, email, password_hash, now=None):
    """
    Create a new user.

    Args:
        name (str): Display name
        email (str): Email address (stored lower-cased)
        password_hash (str): Already hashed password
        now (datetime, optional): Creation time (default: server time)

    Returns:
        dict: The created user

    Raises:
        ValidationError: If the email is already registered
    """
    email = email.lower().strip()
    now = now or now_utc()

    with session_scope("creating user") as session:
        existing = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if existing:
            logger.warning(f"User with email {email} already exists")
            raise ValidationError("Email already registered")

        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            created_at=to_storage(now),
            last_login=to_storage(now),
        )
        session.add(user)
        try:
            session.flush()
        except IntegrityError:
            # Registered concurrently between the check and the insert
            raise ValidationError("Email already registered") from None
        logger.info(f"Created user: {email} (ID: {user.user_id})")
        return _user_to_dict(user)


def get_user(user_id):
    """
    Get a user by id.

    Raises:
        NotFound: If the user does not exist
    """
    with session_scope(f"fetching user {user_id}") as session:
        return _user_to_dict(_get_user_row(session, user_id))


def get_user_by_email(email, include_secret=False):
    """
    Get a user by email address, or None if nobody registered it.
    """
    email = (email or '').lower().strip()
    with session_scope("fetching user by email") as session:
        user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if user is None:
            return None
        return _user_to_dict(user, include_secret=include_secret)


def touch_last_login(user_id, now=None):
    """
    Record a successful login.
    """
    with session_scope(f"updating last login for user {user_id}") as session:
        result = session.execute(
            update(User)
            .where(User.user_id == user_id)
            .values(last_login=to_storage(now or now_utc()))
        )
        if result.rowcount == 0:
            raise NotFound("User not found")


def update_user_settings(user_id, partial):
    """
    Update a subset of the user's settings.

    Args:
        user_id (int): Owning user
        partial (dict): Any of theme, notifications, focus_alerts, weather_city

    Returns:
        dict: The full settings after the update
    """
    _reject_unknown(partial, SETTINGS_FIELDS)

    with session_scope(f"updating settings for user {user_id}") as session:
        user = _get_user_row(session, user_id)
        for field in SETTINGS_FIELDS:
            if field in partial and partial[field] is not None:
                setattr(user, field, partial[field])
        user.version = user.version + 1
        session.flush()
        logger.info(f"Updated settings for user {user_id}")
        return _user_to_dict(user)['settings']


def update_user_streak(user_id, streak, last_active_date, expected_version=None):
    """
    Store a new streak for the user.

    Args:
        user_id (int): Owning user
        streak (int): New streak count
        last_active_date (datetime): New last active timestamp
        expected_version (int, optional): Version the caller read the user
            at. When given, the write only happens if nobody updated the
            user since.

    Returns:
        int: The user's new version

    Raises:
        NotFound: If the user does not exist
        ConflictError: If expected_version no longer matches
    """
    if streak < 0:
        raise ValidationError("Streak cannot be negative")

    with session_scope(f"updating streak for user {user_id}") as session:
        conditions = [User.user_id == user_id]
        if expected_version is not None:
            conditions.append(User.version == expected_version)

        result = session.execute(
            update(User)
            .where(and_(*conditions))
            .values(
                streak=streak,
                last_active_date=to_storage(last_active_date),
                version=User.version + 1,
            )
        )
        if result.rowcount == 0:
            _get_user_row(session, user_id)
            raise ConflictError(f"User {user_id} was modified concurrently")

        new_version = session.execute(select(User.version).where(User.user_id == user_id)).scalar_one()
        logger.info(f"Updated streak for user {user_id}: {streak}")
        return new_version


# ----------------------------------------------------------------------------
# Tasks
# ----------------------------------------------------------------------------

def create_task(user_id, title, description='', date=None, time=None, priority='medium', now=None):
    """
    Create a task for a user.

    Returns:
        dict: The created task
    """
    title = _require_title(title)
    priority = _check_priority(priority or 'medium')
    date = _parse_date(date)

    with session_scope("creating task") as session:
        _get_user_row(session, user_id)
        task = Task(
            user_id=user_id,
            title=title,
            description=description or '',
            date=date,
            time=time,
            priority=priority,
            completed=False,
            created_at=to_storage(now or now_utc()),
        )
        session.add(task)
        session.flush()
        logger.info(f"Created task {task.task_id} for user {user_id}")
        return _task_to_dict(task)


def update_task(user_id, task_id, changes, now=None):
    """
    Apply a partial update to one of the user's tasks.

    Setting completed stamps completed_at; clearing it clears completed_at.

    Raises:
        NotFound: If the task does not exist or belongs to another user
    """
    _reject_unknown(changes, TASK_FIELDS)

    with session_scope(f"updating task {task_id}") as session:
        task = session.execute(
            select(Task).where(and_(Task.task_id == task_id, Task.user_id == user_id))
        ).scalar_one_or_none()
        if task is None:
            raise NotFound("Task not found")

        if 'title' in changes:
            task.title = _require_title(changes['title'])
        if 'description' in changes:
            task.description = changes['description'] or ''
        if 'date' in changes:
            task.date = _parse_date(changes['date'])
        if 'time' in changes:
            task.time = changes['time']
        if 'priority' in changes:
            task.priority = _check_priority(changes['priority'])
        if 'completed' in changes and changes['completed'] is not None:
            completed = bool(changes['completed'])
            if completed and not task.completed:
                task.completed_at = to_storage(now or now_utc())
            elif not completed:
                task.completed_at = None
            task.completed = completed

        session.flush()
        return _task_to_dict(task)


def delete_task(user_id, task_id):
    """
    Delete one of the user's tasks.

    Raises:
        NotFound: If the task does not exist or belongs to another user
    """
    with session_scope(f"deleting task {task_id}") as session:
        result = session.execute(
            delete(Task).where(and_(Task.task_id == task_id, Task.user_id == user_id))
        )
        if result.rowcount == 0:
            raise NotFound("Task not found")
        logger.info(f"Deleted task {task_id} for user {user_id}")


def list_tasks(user_id):
    """
    Get all of a user's tasks, newest first.
    """
    with session_scope(f"fetching tasks for user {user_id}") as session:
        stmt = (
            select(Task)
            .where(Task.user_id == user_id)
            .order_by(Task.created_at.desc(), Task.task_id.desc())
        )
        return [_task_to_dict(t) for t in session.execute(stmt).scalars().all()]


# ----------------------------------------------------------------------------
# Notes
# ----------------------------------------------------------------------------

def create_note(user_id, title, content='', now=None):
    """
    Create a note for a user.
    """
    title = _require_title(title)
    now = to_storage(now or now_utc())

    with session_scope("creating note") as session:
        _get_user_row(session, user_id)
        note = Note(
            user_id=user_id,
            title=title,
            content=content or '',
            created_at=now,
            updated_at=now,
        )
        session.add(note)
        session.flush()
        logger.info(f"Created note {note.note_id} for user {user_id}")
        return _note_to_dict(note)


def update_note(user_id, note_id, changes, now=None):
    """
    Apply a partial update to one of the user's notes and bump updated_at.

    Raises:
        NotFound: If the note does not exist or belongs to another user
    """
    _reject_unknown(changes, NOTE_FIELDS)

    with session_scope(f"updating note {note_id}") as session:
        note = session.execute(
            select(Note).where(and_(Note.note_id == note_id, Note.user_id == user_id))
        ).scalar_one_or_none()
        if note is None:
            raise NotFound("Note not found")

        if 'title' in changes:
            note.title = _require_title(changes['title'])
        if 'content' in changes:
            note.content = changes['content'] or ''
        note.updated_at = to_storage(now or now_utc())

        session.flush()
        return _note_to_dict(note)


def delete_note(user_id, note_id):
    """
    Delete one of the user's notes.

    Raises:
        NotFound: If the note does not exist or belongs to another user
    """
    with session_scope(f"deleting note {note_id}") as session:
        result = session.execute(
            delete(Note).where(and_(Note.note_id == note_id, Note.user_id == user_id))
        )
        if result.rowcount == 0:
            raise NotFound("Note not found")
        logger.info(f"Deleted note {note_id} for user {user_id}")


def list_notes(user_id):
    """
    Get all of a user's notes, most recently updated first.
    """
    with session_scope(f"fetching notes for user {user_id}") as session:
        stmt = (
            select(Note)
            .where(Note.user_id == user_id)
            .order_by(Note.updated_at.desc(), Note.note_id.desc())
        )
        return [_note_to_dict(n) for n in session.execute(stmt).scalars().all()]


# ----------------------------------------------------------------------------
# Focus sessions (append-only)
# ----------------------------------------------------------------------------

def create_session(user_id, task, duration, start_time, end_time, date=None):
    """
    Record a finished focus session.

    Args:
        user_id (int): Owning user
        task (str): Session label
        duration (int): Focused minutes (positive)
        start_time (datetime): When the session started
        end_time (datetime): When the session finished
        date (datetime, optional): Attribution time (default: server time)

    Returns:
        dict: The created session
    """
    if not task or not str(task).strip():
        raise ValidationError("Task is required")
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        raise ValidationError("Duration must be a positive whole number of minutes")
    start_time = coerce_datetime(start_time)
    end_time = coerce_datetime(end_time)
    if start_time is None or end_time is None:
        raise ValidationError("start_time and end_time are required")
    if end_time < start_time:
        raise ValidationError("end_time cannot be before start_time")

    with session_scope("creating focus session") as session:
        _get_user_row(session, user_id)
        focus_session = FocusSession(
            user_id=user_id,
            task=str(task).strip(),
            duration=duration,
            start_time=to_storage(start_time),
            end_time=to_storage(end_time),
            date=to_storage(date or now_utc()),
        )
        session.add(focus_session)
        session.flush()
        logger.info(f"Created focus session {focus_session.session_id} for user {user_id}: {duration} min")
        return _session_to_dict(focus_session)


def list_sessions(user_id):
    """
    Get all of a user's focus sessions, newest first.
    """
    with session_scope(f"fetching sessions for user {user_id}") as session:
        stmt = (
            select(FocusSession)
            .where(FocusSession.user_id == user_id)
            .order_by(FocusSession.date.desc(), FocusSession.session_id.desc())
        )
        return [_session_to_dict(s) for s in session.execute(stmt).scalars().all()]


if __name__ == "__main__":
    init_database()
