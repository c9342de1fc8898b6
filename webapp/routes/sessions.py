"""
Focus Session Routes

Focus sessions are append-only: they can be listed and created, never
edited or deleted. Saving one counts as activity for the streak.
"""

from flask import Blueprint, g, jsonify, request

from config.database import create_session, list_sessions
from webapp.schemas import SessionCreate, parse
from webapp.services.activity_service import record_session_activity
from webapp.services.auth_service import login_required

bp = Blueprint('sessions', __name__, url_prefix='/api/sessions')


@bp.route('', methods=['GET'])
@login_required
def get_sessions():
    return jsonify({'sessions': list_sessions(g.user_id)})


@bp.route('', methods=['POST'])
@login_required
def post_session():
    body = parse(SessionCreate, request.get_json(silent=True))
    session = create_session(
        g.user_id,
        task=body.task,
        duration=body.duration,
        start_time=body.start_time,
        end_time=body.end_time,
    )
    streak = record_session_activity(g.user_id)
    return jsonify({'message': 'Session created', 'session': session, 'streak': streak}), 201
