"""
Authentication Routes

Handles user registration, login and the current-user lookup.
"""

import logging

from flask import Blueprint, g, jsonify, request

from config.database import create_user, get_user, get_user_by_email, touch_last_login
from tracker.errors import Unauthorized
from utils.dates import now_utc
from webapp.schemas import LoginRequest, RegisterRequest, parse
from webapp.services.activity_service import record_activity
from webapp.services.auth_service import hash_password, issue_token, login_required, verify_password

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def public_user(user):
    """User fields safe to send to the browser."""
    return {
        'id': user['user_id'],
        'name': user['name'],
        'email': user['email'],
        'settings': user['settings'],
        'streak': user['streak'],
    }


@bp.route('/register', methods=['POST'])
def register():
    """Create an account and log it in."""
    body = parse(RegisterRequest, request.get_json(silent=True))

    user = create_user(body.name, body.email, hash_password(body.password))
    token = issue_token(user['user_id'])

    return jsonify({
        'message': 'Account created successfully',
        'token': token,
        'user': public_user(user),
    }), 201


@bp.route('/login', methods=['POST'])
def login():
    """Verify credentials, count the login towards the streak, issue a token."""
    body = parse(LoginRequest, request.get_json(silent=True))

    user = get_user_by_email(body.email, include_secret=True)
    if not user or not verify_password(user['password_hash'], body.password):
        logger.info(f"Failed login for {body.email}")
        raise Unauthorized("Invalid email or password")

    now = now_utc()
    record_activity(user['user_id'], now)
    touch_last_login(user['user_id'], now)
    user = get_user(user['user_id'])

    return jsonify({
        'message': 'Login successful',
        'token': issue_token(user['user_id']),
        'user': public_user(user),
    })


@bp.route('/me')
@login_required
def me():
    return jsonify({'user': public_user(g.user)})
