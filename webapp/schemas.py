"""
Request Schemas

Explicit pydantic models for every JSON body the API accepts. Parsing
failures are converted to the tracker's ValidationError so every endpoint
reports bad input the same way.
"""

import math
from datetime import datetime
from datetime import date as CalendarDate
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from config.settings import MIN_PASSWORD_LENGTH
from tracker.errors import ValidationError
from utils.dates import coerce_datetime

Priority = Literal['low', 'medium', 'high']


def _describe(error):
    field = '.'.join(str(part) for part in error.get('loc', ()))
    if error.get('type') == 'missing':
        return f"{field} is required"
    ctx = error.get('ctx') or {}
    if 'error' in ctx:
        return str(ctx['error'])
    if field:
        return f"{field}: {error.get('msg')}"
    return error.get('msg', 'Invalid request')


def parse(model, payload):
    """
    Validate a JSON body against a schema.

    Raises:
        ValidationError: With a message describing the first problem
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e.errors()[0])) from None


def _required_text(value, message):
    if value is None or not str(value).strip():
        raise ValueError(message)
    return str(value).strip()


class _Body(BaseModel):
    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)


# Auth

class RegisterRequest(_Body):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @model_validator(mode='after')
    def check_fields(self):
        if not self.name or not self.email or not self.password:
            raise ValueError("All fields are required")
        if '@' not in self.email:
            raise ValueError("Invalid email address")
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return self


class LoginRequest(_Body):
    email: Optional[str] = None
    password: Optional[str] = None

    @model_validator(mode='after')
    def check_fields(self):
        if not self.email or not self.password:
            raise ValueError("Email and password are required")
        return self


class SettingsUpdate(_Body):
    theme: Optional[str] = None
    notifications: Optional[bool] = None
    focus_alerts: Optional[bool] = None
    weather_city: Optional[str] = None


# Tasks

class TaskCreate(_Body):
    title: str
    description: str = ''
    date: Optional[CalendarDate] = None
    time: Optional[str] = None
    priority: Priority = 'medium'

    @field_validator('title', mode='before')
    @classmethod
    def title_required(cls, value):
        return _required_text(value, "Title is required")

    @field_validator('date', 'time', mode='before')
    @classmethod
    def blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class TaskUpdate(_Body):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[CalendarDate] = None
    time: Optional[str] = None
    priority: Optional[Priority] = None
    completed: Optional[bool] = None

    @field_validator('title', mode='before')
    @classmethod
    def title_not_blank(cls, value):
        return _required_text(value, "Title is required")

    @field_validator('date', 'time', mode='before')
    @classmethod
    def blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


# Notes

class NoteCreate(_Body):
    title: str
    content: str = ''

    @field_validator('title', mode='before')
    @classmethod
    def title_required(cls, value):
        return _required_text(value, "Title is required")


class NoteUpdate(_Body):
    title: Optional[str] = None
    content: Optional[str] = None

    @field_validator('title', mode='before')
    @classmethod
    def title_not_blank(cls, value):
        return _required_text(value, "Title is required")


# Focus sessions

class SessionCreate(_Body):
    """
    A finished focus session.

    duration is the focused (unpaused) minutes reported by the timer. It can
    never exceed the wall-clock span between start_time and end_time; when
    omitted it is derived from that span.
    """
    task: str
    duration: Optional[int] = None
    start_time: datetime
    end_time: datetime

    @field_validator('task', mode='before')
    @classmethod
    def task_required(cls, value):
        return _required_text(value, "Task is required")

    @field_validator('start_time', 'end_time')
    @classmethod
    def as_utc(cls, value):
        return coerce_datetime(value)

    @model_validator(mode='after')
    def check_duration(self):
        span = (self.end_time - self.start_time).total_seconds()
        if span < 0:
            raise ValueError("end_time cannot be before start_time")

        if self.duration is None:
            self.duration = max(1, int(round(span / 60)))
        elif self.duration <= 0:
            raise ValueError("Duration must be a positive whole number of minutes")
        elif self.duration > max(1, math.ceil(span / 60)):
            raise ValueError("Duration cannot exceed the time between start_time and end_time")
        return self
