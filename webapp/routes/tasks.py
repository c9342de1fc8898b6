"""
Task Routes

CRUD for the authenticated user's tasks.
"""

from flask import Blueprint, g, jsonify, request

from config.database import create_task, delete_task, list_tasks, update_task
from webapp.schemas import TaskCreate, TaskUpdate, parse
from webapp.services.auth_service import login_required

bp = Blueprint('tasks', __name__, url_prefix='/api/tasks')


@bp.route('', methods=['GET'])
@login_required
def get_tasks():
    return jsonify({'tasks': list_tasks(g.user_id)})


@bp.route('', methods=['POST'])
@login_required
def post_task():
    body = parse(TaskCreate, request.get_json(silent=True))
    task = create_task(
        g.user_id,
        title=body.title,
        description=body.description,
        date=body.date,
        time=body.time,
        priority=body.priority,
    )
    return jsonify({'message': 'Task created', 'task': task}), 201


@bp.route('/<int:task_id>', methods=['PUT'])
@login_required
def put_task(task_id):
    body = parse(TaskUpdate, request.get_json(silent=True))
    task = update_task(g.user_id, task_id, body.model_dump(exclude_unset=True))
    return jsonify({'message': 'Task updated', 'task': task})


@bp.route('/<int:task_id>', methods=['DELETE'])
@login_required
def remove_task(task_id):
    delete_task(g.user_id, task_id)
    return jsonify({'message': 'Task deleted'})
