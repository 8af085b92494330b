import os
import sys
from datetime import date
import pytest

# Ensure the backend root (containing the `ledger` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from ledger import create_app, db, socketio
from ledger.models import FIXED, DYNAMIC, HIGHEST_SCORE, LOWEST_SCORE
from ledger.services import Ledger


GAME_DAY = date(2026, 3, 14)

FOUR_SEAT_FIXED = {
    'name': 'FourSeatFixed',
    'min_players': 4,
    'max_players': 4,
    'win_condition': LOWEST_SCORE,
    'round_structure': FIXED,
    'default_round_names': [f'Hand {i + 1}' for i in range(12)],
}

OPEN_ENDED = {
    'name': 'OpenEnded',
    'min_players': 2,
    'max_players': 6,
    'win_condition': HIGHEST_SCORE,
    'round_structure': DYNAMIC,
    'default_round_names': [],
}


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LEDGER_AUTO_INIT = False
    DYNAMIC_ROUND_FLOOR = 1
    DYNAMIC_ROUND_EXTEND = 1


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import ledger.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def ledger(flask_app):
    return Ledger(db.session, today=lambda: GAME_DAY)


@pytest.fixture()
def templates(ledger):
    """Seed the two test templates; returns {'fixed': id, 'dynamic': id}."""
    fixed, dynamic = ledger.catalog.seed([FOUR_SEAT_FIXED, OPEN_ENDED])
    return {'fixed': fixed.id, 'dynamic': dynamic.id}


@pytest.fixture()
def fixed_session(ledger, templates):
    session_id = ledger.sessions.create(templates['fixed'], ['A', 'B', 'C', 'D'])
    players = ledger.sessions.details(session_id).players
    return session_id, {p.name: p.id for p in players}


@pytest.fixture()
def dynamic_session(ledger, templates):
    session_id = ledger.sessions.create(templates['dynamic'], ['p1', 'p2'])
    players = ledger.sessions.details(session_id).players
    return session_id, {p.name: p.id for p in players}


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
