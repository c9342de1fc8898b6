"""
Note Routes

CRUD for the authenticated user's notes.
"""

from flask import Blueprint, g, jsonify, request

from config.database import create_note, delete_note, list_notes, update_note
from webapp.schemas import NoteCreate, NoteUpdate, parse
from webapp.services.auth_service import login_required

bp = Blueprint('notes', __name__, url_prefix='/api/notes')


@bp.route('', methods=['GET'])
@login_required
def get_notes():
    return jsonify({'notes': list_notes(g.user_id)})


@bp.route('', methods=['POST'])
@login_required
def post_note():
    body = parse(NoteCreate, request.get_json(silent=True))
    note = create_note(g.user_id, title=body.title, content=body.content)
    return jsonify({'message': 'Note created', 'note': note}), 201


@bp.route('/<int:note_id>', methods=['PUT'])
@login_required
def put_note(note_id):
    body = parse(NoteUpdate, request.get_json(silent=True))
    note = update_note(g.user_id, note_id, body.model_dump(exclude_unset=True))
    return jsonify({'message': 'Note updated', 'note': note})


@bp.route('/<int:note_id>', methods=['DELETE'])
@login_required
def remove_note(note_id):
    delete_note(g.user_id, note_id)
    return jsonify({'message': 'Note deleted'})
