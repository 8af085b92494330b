from datetime import date

from flask import Blueprint, jsonify, request, current_app, Response
from ledger import db
from ledger.errors import ValidationError, NotFoundError
from ledger.services import ledger_for_app
from ledger.socketio_events import broadcast_state_update
from ledger.storage import export_snapshot


ledger_api = Blueprint('ledger_api', __name__)


def _ledger():
    return ledger_for_app(current_app, db.session)


@ledger_api.errorhandler(ValidationError)
def handle_validation_error(exc):
    current_app.logger.info(f"[rejected] {request.method} {request.path}: {exc}")
    return jsonify({'error': str(exc)}), 400


@ledger_api.errorhandler(NotFoundError)
def handle_not_found(exc):
    return jsonify({'error': str(exc)}), 404


@ledger_api.route('/templates', methods=['GET'])
def list_templates():
    return jsonify([t.to_dict() for t in _ledger().catalog.list()])


@ledger_api.route('/sessions', methods=['GET'])
def sessions_by_date():
    played_at = request.args.get('date') or date.today().isoformat()
    sessions = _ledger().sessions.by_date(played_at)
    return jsonify([s.to_dict() for s in sessions])


@ledger_api.route('/sessions', methods=['POST'])
def create_session():
    data = request.get_json(silent=True) or {}
    template_id = data.get('template_id')
    player_names = data.get('player_names')
    if template_id is None or not isinstance(player_names, list):
        return jsonify({'error': 'template_id and a player_names list are required'}), 400

    session_id = _ledger().sessions.create(template_id, player_names)
    return jsonify({'session_id': session_id}), 201


@ledger_api.route('/sessions/<int:session_id>', methods=['GET'])
def get_session_details(session_id):
    return jsonify(_ledger().sessions.details(session_id).to_dict())


@ledger_api.route('/sessions/<int:session_id>/scoreboard', methods=['GET'])
def get_scoreboard(session_id):
    ledger = _ledger()
    board = ledger.aggregator.scoreboard(session_id)
    board['standings'] = ledger.aggregator.standings(session_id)
    return jsonify(board)


@ledger_api.route('/sessions/<int:session_id>/scores', methods=['PUT'])
def set_score(session_id):
    data = request.get_json(silent=True) or {}
    if 'round_index' not in data or 'player_id' not in data:
        return jsonify({'error': 'round_index and player_id are required'}), 400

    ledger = _ledger()
    value = ledger.scores.set_score(session_id, data['round_index'], data['player_id'], data.get('value'))
    broadcast_state_update(session_id)
    return jsonify({
        'session_id': session_id,
        'round_index': int(data['round_index']),
        'player_id': data['player_id'],
        'value': value,
        'totals': ledger.aggregator.totals(session_id),
        'visible_round_count': ledger.scores.visible_round_count(session_id),
    })


@ledger_api.route('/sessions/<int:session_id>/players', methods=['POST'])
def add_player(session_id):
    data = request.get_json(silent=True) or {}
    player = _ledger().roster.add_player(session_id, data.get('name'))
    broadcast_state_update(session_id)
    return jsonify(player.to_dict()), 201


@ledger_api.route('/export', methods=['GET'])
def export():
    blob = export_snapshot(db.session)
    filename = f"backup-{date.today().isoformat()}.json"
    return Response(
        blob,
        mimetype='application/json',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )
