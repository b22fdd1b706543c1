import os
import sys
import pytest

# Ensure the backend root (containing the `reflexboard` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from reflexboard import create_app, db, socketio

ADMIN_SECRET = 'letmein-admin'


class TestConfig:
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SCORE_STORE_BACKEND = 'json'
    SCORE_STORE_PATH = None
    ADMIN_TOKEN = ADMIN_SECRET
    LEADERBOARD_LIMIT = 5
    REQUIRE_NICKNAME = True
    DEFAULT_NICKNAME = 'Player'
    TRUST_FORWARDED_FOR = True
    MAX_CONTENT_LENGTH = 1_000_000


def make_app(tmp_path, **overrides):
    attrs = {'SCORE_STORE_PATH': str(tmp_path / 'data' / 'leaderboard.json')}
    attrs.update(overrides)
    config = type('Config', (TestConfig,), attrs)
    return create_app(config)


@pytest.fixture()
def app_factory(tmp_path):
    """Build an app with config overrides, e.g. ``app_factory(ADMIN_TOKEN='')``."""
    contexts = []

    def _build(**overrides):
        application = make_app(tmp_path, **overrides)
        ctx = application.app_context()
        ctx.push()
        contexts.append(ctx)
        return application

    yield _build
    for ctx in reversed(contexts):
        db.session.remove()
        ctx.pop()


@pytest.fixture(params=['json', 'sql'])
def flask_app(request, app_factory):
    return app_factory(SCORE_STORE_BACKEND=request.param)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def store(flask_app):
    return flask_app.extensions['score_store']


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


def submit(client, payload, ip='198.51.100.23'):
    return client.post('/api/score', json=payload, environ_base={'REMOTE_ADDR': ip})


def admin_headers(token=ADMIN_SECRET):
    return {'Authorization': f'Bearer {token}'}
