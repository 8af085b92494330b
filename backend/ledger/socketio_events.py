from flask_socketio import join_room, leave_room, emit
from ledger import socketio


def session_room(session_id) -> str:
    return f"session:{session_id}"


def broadcast_state_update(session_id: int) -> None:
    """Tell every scoreboard watching this session to re-read it."""
    socketio.emit('state_update', {'session_id': session_id}, to=session_room(session_id), namespace='/ws')


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def _session_id_from(data):
    raw = (data or {}).get('session_id')
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def handle_join_session(data):
    session_id = _session_id_from(data)
    if session_id is None:
        emit('error', {'message': 'session_id is required'})
        return
    room = session_room(session_id)
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_session(data):
    session_id = _session_id_from(data)
    if session_id is None:
        emit('error', {'message': 'session_id is required'})
        return
    room = session_room(session_id)
    leave_room(room)
    emit('left', {'room': room})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_session', handle_join_session, namespace='/ws')
    socketio.on_event('leave_session', handle_leave_session, namespace='/ws')