import logging
from dataclasses import dataclass, field
from datetime import date, datetime

from ledger.errors import NotFoundError, ValidationError
from ledger.models import GameSession, GameTemplate, SessionPlayer, ScoreEntry
from .roster import clean_player_names

logger = logging.getLogger(__name__)


def parse_played_at(value) -> date:
    """Accept a date or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f'Invalid date {value!r}, expected YYYY-MM-DD') from exc


@dataclass
class SessionDetails:
    session: GameSession
    template: GameTemplate
    players: list = field(default_factory=list)
    scores: list = field(default_factory=list)

    def to_dict(self):
        return {
            'session': self.session.to_dict(),
            'template': self.template.to_dict(),
            'players': [p.to_dict() for p in self.players],
            'scores': [s.to_dict() for s in self.scores],
        }


class SessionStore:
    def __init__(self, session, catalog, roster, today=None):
        self.session = session
        self.catalog = catalog
        self.roster = roster
        self.today = today or date.today

    def create(self, template_id, player_names) -> int:
        """Create a session and seat its players in a single transaction.

        Validation happens before anything is added to the session, so a
        rejected call leaves no sessions or seats behind.
        """
        template = self.catalog.get(template_id)
        names = clean_player_names(player_names)
        if len(names) < template.min_players:
            raise ValidationError(
                f'{template.name} requires at least {template.min_players} players, got {len(names)}'
            )
        if len(names) > template.max_players:
            raise ValidationError(
                f'{template.name} allows at most {template.max_players} players, got {len(names)}'
            )

        try:
            game_session = GameSession(template_id=template.id, played_at=self.today(), is_finished=False)
            self.session.add(game_session)
            self.session.flush()
            for name in names:
                self.roster.seat(game_session, name)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            f"[session-create] session={game_session.id} template={template.id} "
            f"players={len(names)} played_at={game_session.played_at.isoformat()}"
        )
        return game_session.id

    def by_date(self, played_at):
        day = parse_played_at(played_at)
        return (
            self.session.query(GameSession)
            .join(GameTemplate, GameSession.template_id == GameTemplate.id)
            .filter(GameSession.played_at == day)
            .order_by(GameSession.id)
            .all()
        )

    def get(self, session_id) -> GameSession:
        game_session = self.session.get(GameSession, session_id) if session_id is not None else None
        if game_session is None:
            raise NotFoundError(f'Session {session_id} not found')
        return game_session

    def details(self, session_id) -> SessionDetails:
        game_session = self.get(session_id)
        players = (
            self.session.query(SessionPlayer)
            .filter_by(session_id=game_session.id)
            .order_by(SessionPlayer.seat_index)
            .all()
        )
        scores = (
            self.session.query(ScoreEntry)
            .filter_by(session_id=game_session.id)
            .order_by(ScoreEntry.round_index, ScoreEntry.player_id)
            .all()
        )
        return SessionDetails(
            session=game_session,
            template=self.catalog.get(game_session.template_id),
            players=players,
            scores=scores,
        )
