"""
User Routes

Per-user settings.
"""

from flask import Blueprint, g, jsonify, request

from config.database import update_user_settings
from webapp.schemas import SettingsUpdate, parse
from webapp.services.auth_service import login_required

bp = Blueprint('user', __name__, url_prefix='/api/user')


@bp.route('/settings', methods=['PUT'])
@login_required
def update_settings():
    body = parse(SettingsUpdate, request.get_json(silent=True))
    settings = update_user_settings(g.user_id, body.model_dump(exclude_none=True))
    return jsonify({'message': 'Settings updated', 'settings': settings})
