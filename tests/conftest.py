"""
Shared fixtures: an app (or bare store) on a throwaway SQLite file.
"""

import sys
from datetime import timedelta
from pathlib import Path

import pytest

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

import config.database as database
from webapp.app import create_app


class FakeClock:
    """Clock whose sleep() advances time instantly."""

    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def db(tmp_path):
    database.configure_database(f"sqlite:///{tmp_path / 'store.db'}")
    database.init_database()
    yield database
    database.engine.dispose()


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'DATABASE_URL': f"sqlite:///{tmp_path / 'api.db'}",
        'SECRET_KEY': 'test-secret',
        'APP_TIMEZONE': 'UTC',
    })
    yield app
    database.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    """Register a user and return (token, user)."""
    def _register(email='ada@example.com', name='Ada', password='secret123'):
        response = client.post('/api/auth/register', json={
            'name': name,
            'email': email,
            'password': password,
        })
        assert response.status_code == 201, response.get_json()
        data = response.get_json()
        return data['token'], data['user']
    return _register


def auth(token):
    return {'Authorization': f'Bearer {token}'}
