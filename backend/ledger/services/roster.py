import logging

from sqlalchemy import func

from ledger.errors import NotFoundError, ValidationError
from ledger.models import GameSession, SessionPlayer, PLAYER_NAME_LENGTH

logger = logging.getLogger(__name__)


def clean_player_names(names):
    """Strip names, drop blanks and repeats; first occurrence keeps its place."""
    cleaned = []
    seen = set()
    for raw in names or []:
        name = str(raw).strip() if raw is not None else ''
        if not name or name in seen:
            continue
        seen.add(name)
        cleaned.append(name)
    return cleaned


class RosterManager:
    """Append-only seating. The only code that creates SessionPlayer rows."""

    def __init__(self, session):
        self.session = session

    def add_player(self, session_id, name) -> SessionPlayer:
        game_session = self.session.get(GameSession, session_id) if session_id is not None else None
        if game_session is None:
            raise NotFoundError(f'Session {session_id} not found')
        try:
            player = self.seat(game_session, name)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(
            f"[seat-add] session={game_session.id} player={player.id} seat={player.seat_index} name={player.name!r}"
        )
        return player

    def seat(self, game_session: GameSession, name) -> SessionPlayer:
        """Add one seat to ``game_session`` without committing.

        The caller owns the transaction; SessionStore.create uses this to
        seat the initial roster together with the session row.
        """
        name = str(name).strip() if name is not None else ''
        if not name:
            raise ValidationError('Player name is required')
        if len(name) > PLAYER_NAME_LENGTH:
            raise ValidationError(f'Player names are limited to {PLAYER_NAME_LENGTH} characters')

        taken = {
            n for (n,) in self.session.query(SessionPlayer.name).filter_by(session_id=game_session.id).all()
        }
        if name in taken:
            raise ValidationError(f'{name!r} is already seated in this session')
        template = game_session.template
        if template is not None and len(taken) >= template.max_players:
            raise ValidationError(f'{template.name} allows at most {template.max_players} players')

        highest = (
            self.session.query(func.max(SessionPlayer.seat_index))
            .filter(SessionPlayer.session_id == game_session.id)
            .scalar()
        )
        seat_index = 1 + (highest if highest is not None else -1)
        player = SessionPlayer(session_id=game_session.id, name=name, seat_index=seat_index)
        self.session.add(player)
        self.session.flush()
        return player
