from flask_socketio import join_room, leave_room, emit
from flagbot import socketio

FEED_ROOM = 'feed'


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_feed(data=None):
    """Subscribe this socket to public announcements."""
    join_room(FEED_ROOM)
    emit('joined', {'room': FEED_ROOM})


def handle_leave_feed(data=None):
    leave_room(FEED_ROOM)
    emit('left', {'room': FEED_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_feed', handle_join_feed, namespace='/ws')
    socketio.on_event('leave_feed', handle_leave_feed, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')

    if testing:
        # Test-only mirror on default namespace
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('join_feed', handle_join_feed, namespace='/')
        socketio.on_event('leave_feed', handle_leave_feed, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
