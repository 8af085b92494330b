"""Ledger domain services: templates, sessions, seats, scores and totals.

Every component takes the SQLAlchemy session it works against in its
constructor, so HTTP routes, CLI commands and tests each decide which
database they talk to. Transport concerns (HTTP, Socket.IO) stay out of
this package.
"""

from .templates import TemplateCatalog
from .roster import RosterManager
from .sessions import SessionStore, SessionDetails
from .scores import ScoreLedger, coerce_score
from .aggregation import ScoreAggregator


class Ledger:
    """All five components wired to one session handle."""

    def __init__(self, session, dynamic_floor=1, dynamic_extend=1, today=None):
        self.catalog = TemplateCatalog(session)
        self.roster = RosterManager(session)
        self.sessions = SessionStore(session, self.catalog, self.roster, today=today)
        self.scores = ScoreLedger(session, dynamic_floor=dynamic_floor, dynamic_extend=dynamic_extend)
        self.aggregator = ScoreAggregator(session, self.scores)


def ledger_for_app(flask_app, session):
    return Ledger(
        session,
        dynamic_floor=int(flask_app.config.get('DYNAMIC_ROUND_FLOOR', 1)),
        dynamic_extend=int(flask_app.config.get('DYNAMIC_ROUND_EXTEND', 1)),
    )


__all__ = [
    'Ledger',
    'ledger_for_app',
    'TemplateCatalog',
    'RosterManager',
    'SessionStore',
    'SessionDetails',
    'ScoreLedger',
    'ScoreAggregator',
    'coerce_score',
]
