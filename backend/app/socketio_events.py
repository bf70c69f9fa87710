from flask_socketio import join_room, leave_room, emit
from flask import current_app
from app import socketio

from app.services.scores.live import LEADERBOARD_ROOM, snapshot_payload


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_subscribe_scores(data=None):
    """Join the leaderboard room and send the current snapshot right away."""
    limit = (data or {}).get('limit')
    try:
        limit = int(limit) if limit is not None else None
    except (TypeError, ValueError):
        emit('error', {'message': 'limit must be an integer'})
        return
    join_room(LEADERBOARD_ROOM)
    emit('subscribed', {'room': LEADERBOARD_ROOM})
    try:
        emit('scores_snapshot', snapshot_payload(limit))
    except Exception as exc:
        current_app.logger.error(f"[live] snapshot query failed: {exc}")
        emit('error', {'message': 'leaderboard unavailable'})


def handle_unsubscribe_scores(data=None):
    leave_room(LEADERBOARD_ROOM)
    emit('unsubscribed', {'room': LEADERBOARD_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('subscribe_scores', handle_subscribe_scores, namespace='/ws')
    socketio.on_event('unsubscribe_scores', handle_unsubscribe_scores, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')
