from flask_socketio import join_room, leave_room, emit
from flask import current_app
from gameshow import socketio
from gameshow.errors import NotFoundError


def _room(tournament_id: str) -> str:
    return f"tournament:{tournament_id}"


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_tournament(data):
    tournament_id = (data or {}).get('tournament_id')
    if not tournament_id:
        emit('error', {'message': 'tournament_id is required'})
        return
    room = _room(tournament_id)
    join_room(room)
    emit('joined', {'room': room})
    # Late joiners get the running countdown right away
    try:
        state = current_app.extensions['round_sessions'].get(tournament_id).state()
    except NotFoundError:
        return
    emit('state_update', state)


def handle_leave_tournament(data):
    tournament_id = (data or {}).get('tournament_id')
    if not tournament_id:
        emit('error', {'message': 'tournament_id is required'})
        return
    room = _room(tournament_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_tournament', handle_join_tournament, namespace=namespace)
        socketio.on_event('leave_tournament', handle_leave_tournament, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
