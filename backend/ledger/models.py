from ledger import db
from ledger.errors import ConfigurationError
import json

HIGHEST_SCORE = 'HIGHEST_SCORE'
LOWEST_SCORE = 'LOWEST_SCORE'
WIN_CONDITIONS = (HIGHEST_SCORE, LOWEST_SCORE)

FIXED = 'FIXED'
DYNAMIC = 'DYNAMIC'
ROUND_STRUCTURES = (FIXED, DYNAMIC)

PLAYER_NAME_LENGTH = 64
# scores.value is a BIGINT, scores.round_index an INTEGER
SCORE_MIN, SCORE_MAX = -2 ** 63, 2 ** 63 - 1
ROUND_INDEX_MAX = 2 ** 31 - 1


def encode_round_names(names) -> str:
    """Serialize an ordered list of round labels for the templates table."""
    return json.dumps([str(n) for n in (names or [])], ensure_ascii=False)


def decode_round_names(text) -> list:
    """Inverse of encode_round_names. Empty or missing text decodes to []."""
    if not text:
        return []
    try:
        names = json.loads(text)
    except ValueError as exc:
        raise ConfigurationError(f'Round names are not valid JSON: {text!r}') from exc
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise ConfigurationError(f'Round names must be a list of strings: {text!r}')
    return names


class GameTemplate(db.Model):
    __tablename__ = 'templates'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False)
    min_players = db.Column(db.Integer, nullable=False)
    max_players = db.Column(db.Integer, nullable=False)
    win_condition = db.Column(db.String(32), nullable=False)  # HIGHEST_SCORE, LOWEST_SCORE
    round_structure = db.Column(db.String(32), nullable=False)  # FIXED, DYNAMIC
    default_round_names = db.Column(db.Text, nullable=False, default='[]')
    sessions = db.relationship('GameSession', back_populates='template', lazy='dynamic')

    @property
    def round_names(self):
        return decode_round_names(self.default_round_names)

    @property
    def is_fixed(self):
        return self.round_structure == FIXED

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'min_players': self.min_players,
            'max_players': self.max_players,
            'win_condition': self.win_condition,
            'round_structure': self.round_structure,
            'default_round_names': self.round_names,
        }


class GameSession(db.Model):
    __tablename__ = 'sessions'
    id = db.Column(db.Integer, primary_key=True)
    template_id = db.Column(db.Integer, db.ForeignKey('templates.id'), nullable=False, index=True)
    played_at = db.Column(db.Date, nullable=False, index=True)
    is_finished = db.Column(db.Boolean, default=False, nullable=False)
    template = db.relationship('GameTemplate', back_populates='sessions')
    players = db.relationship(
        'SessionPlayer',
        back_populates='session',
        order_by='SessionPlayer.seat_index',
        cascade='all, delete-orphan',
    )
    scores = db.relationship('ScoreEntry', back_populates='session', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'template_id': self.template_id,
            'template_name': self.template.name if self.template else None,
            'played_at': self.played_at.isoformat() if self.played_at else None,
            'is_finished': self.is_finished,
        }


class SessionPlayer(db.Model):
    __tablename__ = 'session_players'
    __table_args__ = (db.UniqueConstraint('session_id', 'seat_index', name='uq_session_seat'),)
    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.Integer, db.ForeignKey('sessions.id'), nullable=False, index=True)
    name = db.Column(db.String(PLAYER_NAME_LENGTH), nullable=False)
    seat_index = db.Column(db.Integer, nullable=False)
    session = db.relationship('GameSession', back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'session_id': self.session_id,
            'name': self.name,
            'seat_index': self.seat_index,
        }


class ScoreEntry(db.Model):
    __tablename__ = 'scores'
    session_id = db.Column(db.Integer, db.ForeignKey('sessions.id'), primary_key=True)
    round_index = db.Column(db.Integer, primary_key=True, autoincrement=False)
    player_id = db.Column(db.Integer, db.ForeignKey('session_players.id'), primary_key=True)
    value = db.Column(db.BigInteger, nullable=False, default=0)
    session = db.relationship('GameSession', back_populates='scores')

    def to_dict(self):
        return {
            'session_id': self.session_id,
            'round_index': self.round_index,
            'player_id': self.player_id,
            'value': self.value,
        }
