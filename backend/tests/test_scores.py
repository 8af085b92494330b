import pytest

from ledger import db
from ledger.errors import NotFoundError, ValidationError
from ledger.models import ScoreEntry
from ledger.services import Ledger, coerce_score


@pytest.mark.parametrize('raw, expected', [
    ('12', 12),
    ('  -3 ', -3),
    ('+8', 8),
    ('4.9', 4),
    ('-4.9', -4),
    ('', 0),
    ('   ', 0),
    ('abc', 0),
    ('12abc', 0),
    ('nan', 0),
    ('inf', 0),
    (None, 0),
    (17, 17),
    (2.5, 2),
    (True, 0),
    ('1e3', 1000),
    ('99999999999999999999', 0),
    ('-99999999999999999999', 0),
    ('1e300', 0),
    (2 ** 63, 0),
    (1e19, 0),
    ('9223372036854775807', 2 ** 63 - 1),
    ('-9223372036854775808', -2 ** 63),
])
def test_coerce_score(raw, expected):
    assert coerce_score(raw) == expected


def test_set_score_is_idempotent(ledger, fixed_session):
    session_id, seats = fixed_session
    ledger.scores.set_score(session_id, 2, seats['B'], '9')
    once = ledger.aggregator.totals(session_id)
    ledger.scores.set_score(session_id, 2, seats['B'], '9')
    assert ledger.aggregator.totals(session_id) == once
    assert ScoreEntry.query.filter_by(session_id=session_id).count() == 1
    assert ledger.scores.get_score(session_id, 2, seats['B']) == 9


def test_set_score_replaces_previous_value(ledger, fixed_session):
    session_id, seats = fixed_session
    ledger.scores.set_score(session_id, 0, seats['A'], '5')
    ledger.scores.set_score(session_id, 0, seats['A'], '11')
    assert ledger.scores.get_score(session_id, 0, seats['A']) == 11
    assert ScoreEntry.query.count() == 1


def test_blank_input_overwrites_with_zero(ledger, fixed_session):
    session_id, seats = fixed_session
    ledger.scores.set_score(session_id, 1, seats['D'], '25')
    stored = ledger.scores.set_score(session_id, 1, seats['D'], '')
    assert stored == 0
    assert ledger.scores.get_score(session_id, 1, seats['D']) == 0
    ledger.scores.set_score(session_id, 1, seats['D'], '25')
    ledger.scores.set_score(session_id, 1, seats['D'], 'oops')
    assert ledger.aggregator.totals(session_id)[seats['D']] == 0


def test_writes_commute_across_keys(ledger, fixed_session):
    session_id, seats = fixed_session
    writes = [(0, seats['A'], '3'), (1, seats['B'], '4'), (0, seats['A'], '6')]
    for args in writes:
        ledger.scores.set_score(session_id, *args)
    forward = ledger.aggregator.totals(session_id)

    db.session.query(ScoreEntry).delete()
    db.session.commit()
    ledger.scores.set_score(session_id, 1, seats['B'], '4')
    ledger.scores.set_score(session_id, 0, seats['A'], '3')
    ledger.scores.set_score(session_id, 0, seats['A'], '6')
    assert ledger.aggregator.totals(session_id) == forward


def test_fixed_round_bounds(ledger, fixed_session):
    session_id, seats = fixed_session
    ledger.scores.set_score(session_id, 11, seats['A'], '1')
    with pytest.raises(ValidationError):
        ledger.scores.set_score(session_id, 12, seats['A'], '1')
    with pytest.raises(ValidationError):
        ledger.scores.set_score(session_id, -1, seats['A'], '1')
    assert ScoreEntry.query.count() == 1


def test_fixed_round_count_never_changes(ledger, fixed_session):
    session_id, seats = fixed_session
    assert ledger.scores.visible_round_count(session_id) == 12
    for round_index in range(12):
        ledger.scores.set_score(session_id, round_index, seats['C'], str(round_index))
        assert ledger.scores.visible_round_count(session_id) == 12
    assert ledger.scores.round_labels(session_id)[0] == 'Hand 1'


def test_dynamic_rounds_auto_extend(ledger, dynamic_session):
    session_id, seats = dynamic_session
    assert ledger.scores.visible_round_count(session_id) == 1
    for round_index in range(6):
        tail = ledger.scores.visible_round_count(session_id) - 1
        assert tail == round_index
        ledger.scores.set_score(session_id, tail, seats['p2'], '1')
        assert ledger.scores.visible_round_count(session_id) >= tail + 2


def test_dynamic_count_follows_highest_written_round(ledger, dynamic_session):
    session_id, seats = dynamic_session
    ledger.scores.set_score(session_id, 9, seats['p1'], '3')
    assert ledger.scores.visible_round_count(session_id) == 11
    labels = ledger.scores.round_labels(session_id)
    assert labels[0] == 'Round 1' and labels[-1] == 'Round 11'


def test_dynamic_floor_and_extend_are_configurable(flask_app, dynamic_session):
    session_id, seats = dynamic_session
    roomy = Ledger(db.session, dynamic_floor=5, dynamic_extend=2)
    assert roomy.scores.visible_round_count(session_id) == 5
    roomy.scores.set_score(session_id, 4, seats['p1'], '1')
    assert roomy.scores.visible_round_count(session_id) == 7


def test_player_from_other_session_rejected(ledger, fixed_session, dynamic_session):
    session_id, _ = fixed_session
    _, other_seats = dynamic_session
    with pytest.raises(NotFoundError):
        ledger.scores.set_score(session_id, 0, other_seats['p1'], '3')


def test_unknown_session(ledger, templates):
    with pytest.raises(NotFoundError):
        ledger.scores.set_score(404, 0, 1, '3')
    with pytest.raises(NotFoundError):
        ledger.scores.visible_round_count(404)


def test_oversized_value_stores_zero(ledger, dynamic_session):
    session_id, seats = dynamic_session
    ledger.scores.set_score(session_id, 0, seats['p1'], '12')
    assert ledger.scores.set_score(session_id, 0, seats['p1'], '99999999999999999999') == 0
    assert ledger.scores.get_score(session_id, 0, seats['p1']) == 0


def test_largest_score_round_trips(ledger, dynamic_session):
    session_id, seats = dynamic_session
    ledger.scores.set_score(session_id, 0, seats['p1'], str(2 ** 63 - 1))
    assert ledger.aggregator.totals(session_id)[seats['p1']] == 2 ** 63 - 1


@pytest.mark.parametrize('round_index', [10 ** 20, 2 ** 31, True, False, 1.5, float('nan'), 'two', None])
def test_bad_round_index_rejected(ledger, dynamic_session, round_index):
    session_id, seats = dynamic_session
    with pytest.raises(ValidationError):
        ledger.scores.set_score(session_id, round_index, seats['p1'], '3')
    assert ScoreEntry.query.count() == 0


def test_integral_float_and_numeric_text_round_index(ledger, dynamic_session):
    session_id, seats = dynamic_session
    ledger.scores.set_score(session_id, 2.0, seats['p1'], '3')
    ledger.scores.set_score(session_id, '4', seats['p2'], '5')
    assert ledger.scores.get_score(session_id, 2, seats['p1']) == 3
    assert ledger.scores.get_score(session_id, 4, seats['p2']) == 5


def test_totals_past_the_column_range(ledger, dynamic_session):
    session_id, seats = dynamic_session
    ledger.scores.set_score(session_id, 0, seats['p1'], str(2 ** 63 - 1))
    ledger.scores.set_score(session_id, 1, seats['p1'], str(2 ** 63 - 1))
    assert ledger.aggregator.totals(session_id)[seats['p1']] == 2 ** 64 - 2
    assert ledger.aggregator.winners(session_id) == {seats['p1']}
