import json
import os
import sys
import pytest

# Ensure the backend root (containing the `app` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from app import create_app, db, socketio, score_store


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SCORES_SERVICE_ACCOUNT = json.dumps({'type': 'service_account', 'client_email': 'writer@test'})
    LEADERBOARD_SIZE = 25
    CORS_ORIGINS = ['http://localhost:5173']


@pytest.fixture()
def make_app(tmp_path):
    """Build an app whose read and write sides share one SQLite file."""
    created = []

    def _make(**overrides):
        db_url = f"sqlite:///{tmp_path / 'scores.db'}"
        attrs = {'SQLALCHEMY_DATABASE_URI': db_url, 'SCORES_DATABASE_URL': db_url}
        attrs.update(overrides)
        config_class = type('TestConfigForRun', (TestConfig,), attrs)
        application = create_app(config_class)
        ctx = application.app_context()
        ctx.push()
        import app.models  # noqa: F401
        db.create_all()
        created.append(ctx)
        return application

    yield _make

    for ctx in reversed(created):
        db.session.remove()
        db.drop_all()
        ctx.pop()
    score_store.dispose()


@pytest.fixture()
def flask_app(make_app):
    return make_app()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
