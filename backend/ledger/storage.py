"""Storage bootstrap and whole-store backup.

The ledger runs against whatever database ``SQLALCHEMY_DATABASE_URI``
names. If that database cannot be opened the app keeps working on an
in-memory SQLite database instead, and says so: ``LEDGER_PERSISTENT`` is
set to False and ``LEDGER_STORAGE_WARNING`` carries the reason.
"""

import json
import logging
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError

from ledger.errors import StorageUnavailable

logger = logging.getLogger(__name__)

TRANSIENT_URI = 'sqlite://'

SNAPSHOT_FORMAT = 'score-ledger-snapshot'
SNAPSHOT_VERSION = 1


def is_transient_uri(uri: str) -> bool:
    return uri in ('sqlite://', 'sqlite:///:memory:')


def open_storage(uri: str) -> None:
    """Check that the database at ``uri`` accepts connections.

    Raises StorageUnavailable when it doesn't.
    """
    try:
        engine = create_engine(uri)
    except (SQLAlchemyError, ValueError) as exc:
        raise StorageUnavailable(f'cannot use database {uri!r}: {exc}') from exc
    try:
        with engine.connect():
            pass
    except SQLAlchemyError as exc:
        raise StorageUnavailable(f'cannot open database {uri!r}: {exc}') from exc
    finally:
        engine.dispose()


def prepare_storage(flask_app) -> bool:
    """Probe the configured database, degrading to in-memory storage.

    Returns True when the data will survive a restart.
    """
    uri = flask_app.config.get('SQLALCHEMY_DATABASE_URI') or TRANSIENT_URI
    try:
        open_storage(uri)
    except StorageUnavailable as exc:
        warning = 'Using in-memory storage; data will not survive a restart'
        flask_app.logger.warning(f"[storage-fallback] {exc}. {warning}")
        flask_app.config['SQLALCHEMY_DATABASE_URI'] = TRANSIENT_URI
        flask_app.config['LEDGER_PERSISTENT'] = False
        flask_app.config['LEDGER_STORAGE_WARNING'] = warning
        return False

    persistent = not is_transient_uri(uri)
    flask_app.config['LEDGER_PERSISTENT'] = persistent
    flask_app.config['LEDGER_STORAGE_WARNING'] = None if persistent else 'Using in-memory storage; data will not survive a restart'
    flask_app.logger.info(f"[storage] uri={uri} persistent={persistent}")
    return persistent


def export_snapshot(session) -> bytes:
    """Serialize every template, session, seat and score to UTF-8 JSON."""
    from ledger.models import GameTemplate, GameSession, SessionPlayer, ScoreEntry

    templates = session.query(GameTemplate).order_by(GameTemplate.id).all()
    sessions = session.query(GameSession).order_by(GameSession.id).all()
    players = session.query(SessionPlayer).order_by(SessionPlayer.session_id, SessionPlayer.seat_index).all()
    scores = session.query(ScoreEntry).order_by(
        ScoreEntry.session_id, ScoreEntry.round_index, ScoreEntry.player_id
    ).all()

    document = {
        'format': SNAPSHOT_FORMAT,
        'version': SNAPSHOT_VERSION,
        'exported_at': datetime.now(timezone.utc).isoformat(),
        'templates': [t.to_dict() for t in templates],
        'sessions': [s.to_dict() for s in sessions],
        'session_players': [p.to_dict() for p in players],
        'scores': [e.to_dict() for e in scores],
    }
    blob = json.dumps(document, ensure_ascii=False, indent=2).encode('utf-8')
    logger.info(
        f"[export] templates={len(templates)} sessions={len(sessions)} "
        f"players={len(players)} scores={len(scores)} bytes={len(blob)}"
    )
    return blob
