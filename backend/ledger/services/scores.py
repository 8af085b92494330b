import logging
import math

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite

from ledger.errors import NotFoundError, ValidationError
from ledger.models import GameSession, SessionPlayer, ScoreEntry, SCORE_MIN, SCORE_MAX, ROUND_INDEX_MAX

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    'sqlite': sqlite.insert,
    'postgresql': postgresql.insert,
}


def coerce_score(raw) -> int:
    """Turn whatever the score cell held into an int.

    Integers pass through, decimals are truncated toward zero. Blank,
    non-numeric and non-finite input becomes 0, and so does anything
    outside the BIGINT range of scores.value. Text with trailing junk
    ("12abc") is non-numeric here and stores 0 rather than 12.
    """
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return _in_range(raw)
    if isinstance(raw, float):
        return _in_range(int(raw)) if math.isfinite(raw) else 0
    text = str(raw).strip()
    if not text:
        return 0
    try:
        return _in_range(int(text))
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return 0
    return _in_range(int(number)) if math.isfinite(number) else 0


def _in_range(value: int) -> int:
    return value if SCORE_MIN <= value <= SCORE_MAX else 0


def check_round_index(round_index) -> int:
    """Validate a round index from a caller; bools and fractions are rejected."""
    if isinstance(round_index, bool):
        raise ValidationError(f'Round index must be an integer, got {round_index!r}')
    if isinstance(round_index, float) and not round_index.is_integer():
        raise ValidationError(f'Round index must be an integer, got {round_index!r}')
    try:
        round_index = int(round_index)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f'Round index must be an integer, got {round_index!r}') from exc
    if round_index < 0:
        raise ValidationError(f'Round index must not be negative, got {round_index}')
    if round_index > ROUND_INDEX_MAX:
        raise ValidationError(f'Round index {round_index} is too large')
    return round_index


class ScoreLedger:
    """Round x seat values for a session.

    ``dynamic_floor`` is the fewest rows an open-ended game ever offers;
    ``dynamic_extend`` is how many empty rows stay below the last written one.
    """

    def __init__(self, session, dynamic_floor=1, dynamic_extend=1):
        self.session = session
        self.dynamic_floor = max(int(dynamic_floor), 0)
        self.dynamic_extend = max(int(dynamic_extend), 1)

    def set_score(self, session_id, round_index, player_id, raw_value) -> int:
        """Upsert one value; returns the stored integer."""
        game_session = self._get_session(session_id)
        template = game_session.template
        round_index = check_round_index(round_index)
        if template.is_fixed:
            round_count = len(template.round_names)
            if round_index >= round_count:
                raise ValidationError(
                    f'{template.name} has {round_count} rounds; round index {round_index} is out of range'
                )

        player = self.session.query(SessionPlayer).filter_by(id=player_id, session_id=game_session.id).first()
        if player is None:
            raise NotFoundError(f'Player {player_id} is not seated in session {game_session.id}')

        value = coerce_score(raw_value)
        try:
            self._upsert(game_session.id, round_index, player.id, value)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(
            f"[score-set] session={game_session.id} round={round_index} player={player.id} value={value}"
        )
        return value

    def get_score(self, session_id, round_index, player_id):
        """Stored value for the key, or None when nothing was written."""
        entry = self.session.get(ScoreEntry, (session_id, round_index, player_id))
        return entry.value if entry is not None else None

    def highest_round_index(self, session_id) -> int:
        """Largest round index written so far, -1 when the grid is empty."""
        highest = (
            self.session.query(func.max(ScoreEntry.round_index))
            .filter(ScoreEntry.session_id == session_id)
            .scalar()
        )
        return highest if highest is not None else -1

    def visible_round_count(self, session_id) -> int:
        game_session = self._get_session(session_id)
        template = game_session.template
        if template.is_fixed:
            return len(template.round_names)
        highest = self.highest_round_index(game_session.id)
        return max(highest + 1 + self.dynamic_extend, self.dynamic_floor)

    def round_labels(self, session_id):
        game_session = self._get_session(session_id)
        template = game_session.template
        if template.is_fixed:
            return template.round_names
        return [f'Round {i + 1}' for i in range(self.visible_round_count(game_session.id))]

    def _get_session(self, session_id) -> GameSession:
        game_session = self.session.get(GameSession, session_id) if session_id is not None else None
        if game_session is None:
            raise NotFoundError(f'Session {session_id} not found')
        return game_session

    def _upsert(self, session_id, round_index, player_id, value) -> None:
        insert = _UPSERT_DIALECTS.get(self.session.get_bind().dialect.name)
        if insert is None:
            # No native ON CONFLICT; merge on the primary key instead
            self.session.merge(
                ScoreEntry(session_id=session_id, round_index=round_index, player_id=player_id, value=value)
            )
            return
        stmt = insert(ScoreEntry).values(
            session_id=session_id, round_index=round_index, player_id=player_id, value=value
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=['session_id', 'round_index', 'player_id'],
            set_={'value': stmt.excluded['value']},
        )
        self.session.execute(stmt)
