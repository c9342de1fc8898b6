"""
Analytics Routes
"""

from flask import Blueprint, current_app, g, jsonify

from config.database import list_sessions, list_tasks
from tracker.analytics import build_analytics
from utils.dates import now_utc
from webapp.services.auth_service import login_required

bp = Blueprint('analytics', __name__, url_prefix='/api/analytics')


@bp.route('', methods=['GET'])
@login_required
def get_analytics():
    """Summary statistics, recomputed from scratch on every request."""
    summary = build_analytics(
        list_tasks(g.user_id),
        list_sessions(g.user_id),
        now_utc(),
        streak=g.user['streak'],
        tz=current_app.config['APP_TIMEZONE'],
    )
    return jsonify({'analytics': summary.to_dict()})
