import os
import sys
import pytest
from flask.testing import FlaskClient

# Ensure the backend root (containing the `gameshow` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from gameshow import create_app, db, initialize_store, socketio
from gameshow.services.rounds import ManualTickSource


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    QUESTION_DURATION_SEC = 5
    ROUNDS_PER_GAME = 3
    TOKEN_MAX_AGE_SEC = 3600
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'password'
    SEED_QUESTIONS = True


@pytest.fixture()
def ticks():
    return ManualTickSource()


def _build_app(ticks, seed):
    application = create_app(TestConfig, tick_source=ticks)
    with application.app_context():
        # Ensure models are imported so tables are created
        import gameshow.models  # noqa: F401
        db.create_all()
    if seed:
        initialize_store(application)
    return application


@pytest.fixture()
def flask_app(ticks):
    application = _build_app(ticks, seed=True)
    with application.app_context():
        yield application
        application.extensions['round_sessions'].stop_all()
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def bare_app(ticks):
    """App with tables but no seeded admin or questions."""
    application = _build_app(ticks, seed=False)
    with application.app_context():
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def store(flask_app):
    return flask_app.extensions['entity_store']


class _FreshContextClient(FlaskClient):
    """Give each request its own app context, as in production, so per-request
    state on ``g`` (e.g. Flask-Login's cached user) does not leak between
    requests through the fixture's long-lived app context."""

    def open(self, *args, **kwargs):
        with self.application.app_context():
            return super().open(*args, **kwargs)


@pytest.fixture()
def client(flask_app):
    flask_app.test_client_class = _FreshContextClient
    return flask_app.test_client()


@pytest.fixture()
def auth_headers(client):
    res = client.post('/api/auth/login', json={'username': 'admin', 'password': 'password'})
    assert res.status_code == 200
    return {'Authorization': f"Bearer {res.get_json()['token']}"}


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
