from collections import defaultdict
from typing import Dict, List, Set

from ledger.errors import NotFoundError
from ledger.models import GameSession, SessionPlayer, ScoreEntry, LOWEST_SCORE


class ScoreAggregator:
    """Totals, winners and standings derived from the score entries.

    Nothing here writes. A seat with no entries totals 0, exactly as if
    every round had been entered as 0.
    """

    def __init__(self, session, ledger):
        self.session = session
        self.ledger = ledger

    def totals(self, session_id) -> Dict[int, int]:
        """Player id -> summed value, in seat order."""
        game_session = self._get_session(session_id)
        # Summed in Python: SQLite's SUM() raises on BIGINT overflow
        sums = defaultdict(int)
        rows = self.session.query(ScoreEntry.player_id, ScoreEntry.value).filter(
            ScoreEntry.session_id == game_session.id
        )
        for player_id, value in rows:
            sums[player_id] += value
        return {p.id: sums[p.id] for p in self._players(game_session.id)}

    def winners(self, session_id) -> Set[int]:
        """Every player whose total equals the best one; ties all win."""
        game_session = self._get_session(session_id)
        totals = self.totals(game_session.id)
        if not totals:
            return set()
        best = self._best(game_session, totals.values())
        return {pid for pid, total in totals.items() if total == best}

    def standings(self, session_id) -> List[dict]:
        """Players best-first with competition ranks (1, 1, 3, ...)."""
        game_session = self._get_session(session_id)
        totals = self.totals(game_session.id)
        lowest_wins = game_session.template.win_condition == LOWEST_SCORE
        players = self._players(game_session.id)
        # sorted() is stable, so tied players keep seat order
        ordered = sorted(players, key=lambda p: totals[p.id] if lowest_wins else -totals[p.id])
        rows = []
        for position, player in enumerate(ordered):
            if rows and rows[-1]['total'] == totals[player.id]:
                rank = rows[-1]['rank']
            else:
                rank = position + 1
            rows.append({
                'player_id': player.id,
                'name': player.name,
                'seat_index': player.seat_index,
                'total': totals[player.id],
                'rank': rank,
            })
        return rows

    def scoreboard(self, session_id) -> dict:
        """Everything a score grid needs in one read."""
        game_session = self._get_session(session_id)
        template = game_session.template
        players = self._players(game_session.id)
        labels = self.ledger.round_labels(game_session.id)
        entries = {
            (e.round_index, e.player_id): e.value
            for e in self.session.query(ScoreEntry).filter_by(session_id=game_session.id).all()
        }
        rounds = [
            {
                'index': idx,
                'label': label,
                'values': {p.id: entries.get((idx, p.id)) for p in players},
            }
            for idx, label in enumerate(labels)
        ]
        return {
            'session': game_session.to_dict(),
            'template': template.to_dict(),
            'players': [p.to_dict() for p in players],
            'rounds': rounds,
            'visible_round_count': len(labels),
            'totals': self.totals(game_session.id),
            'winners': sorted(self.winners(game_session.id)),
        }

    @staticmethod
    def _best(game_session: GameSession, values):
        if game_session.template.win_condition == LOWEST_SCORE:
            return min(values)
        return max(values)

    def _players(self, session_id):
        return (
            self.session.query(SessionPlayer)
            .filter_by(session_id=session_id)
            .order_by(SessionPlayer.seat_index)
            .all()
        )

    def _get_session(self, session_id) -> GameSession:
        game_session = self.session.get(GameSession, session_id) if session_id is not None else None
        if game_session is None:
            raise NotFoundError(f'Session {session_id} not found')
        return game_session
