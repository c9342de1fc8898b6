"""
Error Taxonomy

Exceptions raised by the store, the services and the request schemas.
Each carries the HTTP status the web app responds with.
"""


class TrackerError(Exception):
    """Base class for all tracker errors."""

    status_code = 500
    default_message = 'Server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TrackerError):
    """Missing or invalid input."""

    status_code = 400
    default_message = 'Invalid request'


class Unauthorized(TrackerError):
    """No caller identity, or one that cannot be verified."""

    status_code = 401
    default_message = 'Authentication required'


class NotFound(TrackerError):
    """Record does not exist or is owned by another user."""

    status_code = 404
    default_message = 'Not found'


class ConflictError(TrackerError):
    """Record changed between read and write."""

    status_code = 409
    default_message = 'Record was modified concurrently'


class StorageError(TrackerError):
    """Persistence failure. Never retried automatically."""

    status_code = 500
    default_message = 'Server error'
