"""
Auth Service

Password hashing and bearer tokens.

Tokens are signed with the application's SECRET_KEY and carry only the
user id; every request re-loads the user so a deleted account stops
authenticating immediately.
"""

import logging
from functools import wraps

from flask import current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from config.database import get_user
from tracker.errors import NotFound, Unauthorized

logger = logging.getLogger(__name__)

TOKEN_SALT = 'tracker-auth'


def hash_password(password):
    return generate_password_hash(password)


def verify_password(password_hash, password):
    return check_password_hash(password_hash, password)


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def issue_token(user_id):
    """
    Create a bearer token for a user.

    Args:
        user_id (int): Authenticated user

    Returns:
        str: Signed token
    """
    return _serializer().dumps({'user_id': user_id})


def resolve_token(token):
    """
    Resolve a bearer token to a user id.

    Raises:
        Unauthorized: If the token is malformed, tampered with or expired
    """
    max_age = current_app.config['TOKEN_MAX_AGE_DAYS'] * 24 * 60 * 60
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        raise Unauthorized("Token expired") from None
    except BadSignature:
        raise Unauthorized("Invalid token") from None

    user_id = payload.get('user_id') if isinstance(payload, dict) else None
    if not isinstance(user_id, int):
        raise Unauthorized("Invalid token")
    return user_id


def _bearer_token():
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def login_required(view):
    """
    Require a valid bearer token.

    Sets g.user_id and g.user for the wrapped view.
    """
    @wraps(view)
    def wrapped(*args, **kwargs):
        token = _bearer_token()
        if token is None:
            raise Unauthorized("Authentication required")

        user_id = resolve_token(token)
        try:
            g.user = get_user(user_id)
        except NotFound:
            logger.warning(f"Token for unknown user {user_id}")
            raise Unauthorized("User not found") from None
        g.user_id = user_id
        return view(*args, **kwargs)

    return wrapped
