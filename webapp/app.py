"""
Flask Application Factory

Creates and configures the Flask application instance.
"""

import logging
from datetime import date, datetime

from flask import Flask, jsonify
from flask.json.provider import DefaultJSONProvider

from config import settings
from config.database import configure_database, init_database
from tracker.errors import StorageError, TrackerError
from utils.dates import now_utc

logger = logging.getLogger(__name__)


class TrackerJSONProvider(DefaultJSONProvider):
    """Serialize dates and datetimes as ISO-8601."""

    @staticmethod
    def default(o):
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        return DefaultJSONProvider.default(o)


def create_app(test_config=None):
    """
    Create and configure the Flask application.

    Args:
        test_config (dict, optional): Overrides for DATABASE_URL, SECRET_KEY,
            APP_TIMEZONE, TOKEN_MAX_AGE_DAYS, TESTING

    Returns:
        Flask: Configured application with tables created
    """
    app = Flask(__name__)
    app.json = TrackerJSONProvider(app)

    app.config.update(
        SECRET_KEY=settings.SECRET_KEY,
        DATABASE_URL=settings.DATABASE_URL,
        APP_TIMEZONE=settings.APP_TIMEZONE,
        TOKEN_MAX_AGE_DAYS=settings.TOKEN_MAX_AGE_DAYS,
    )
    if test_config:
        app.config.update(test_config)

    configure_database(app.config['DATABASE_URL'])
    init_database()

    from webapp.routes import analytics, auth, notes, sessions, tasks, user
    for module in (auth, user, tasks, notes, sessions, analytics):
        app.register_blueprint(module.bp)

    @app.errorhandler(TrackerError)
    def handle_tracker_error(error):
        if isinstance(error, StorageError):
            logger.error(f"Storage error: {error.__cause__ or error}")
        return jsonify({'error': error.message}), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.route('/api/health')
    def health():
        """Health check endpoint."""
        return {
            'status': 'ok',
            'timestamp': now_utc().isoformat()
        }

    return app
