"""
SQLAlchemy ORM Models
"""

from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, Text, CheckConstraint
from sqlalchemy.orm import relationship, declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

PRIORITIES = ('low', 'medium', 'high')


class User(Base):
    __tablename__ = 'users'

    user_id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    last_login = Column(DateTime)

    # Settings
    theme = Column(String, default='dark', nullable=False)
    notifications = Column(Boolean, default=True, nullable=False)
    focus_alerts = Column(Boolean, default=True, nullable=False)
    weather_city = Column(String, default='', nullable=False)

    streak = Column(Integer, default=0, nullable=False)
    last_active_date = Column(DateTime)  # NULL until the first activity
    version = Column(Integer, default=1, nullable=False)  # Bumped on every streak/settings write

    # Relationships
    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan")
    notes = relationship("Note", back_populates="user", cascade="all, delete-orphan")
    focus_sessions = relationship("FocusSession", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (CheckConstraint('streak >= 0', name='ck_users_streak'),)


class Task(Base):
    __tablename__ = 'tasks'

    task_id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.user_id'), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, default='', nullable=False)
    date = Column(Date)
    time = Column(String)  # HH:MM as entered
    priority = Column(String, default='medium', nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime)  # Set iff completed

    # Relationships
    user = relationship("User", back_populates="tasks")

    __table_args__ = (CheckConstraint("priority IN ('low', 'medium', 'high')", name='ck_tasks_priority'),)


class Note(Base):
    __tablename__ = 'notes'

    note_id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.user_id'), nullable=False, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, default='', nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Relationships
    user = relationship("User", back_populates="notes")


class FocusSession(Base):
    __tablename__ = 'focus_sessions'

    session_id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.user_id'), nullable=False, index=True)
    task = Column(String, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    date = Column(DateTime, nullable=False)

    # Relationships
    user = relationship("User", back_populates="focus_sessions")

    __table_args__ = (CheckConstraint('duration > 0', name='ck_focus_sessions_duration'),)
