from flask import current_app

from app import socketio
from app.models import ScoreEntry

LEADERBOARD_ROOM = 'leaderboard'
MAX_LEADERBOARD_SIZE = 25


def leaderboard_size() -> int:
    try:
        size = int(current_app.config.get('LEADERBOARD_SIZE', MAX_LEADERBOARD_SIZE))
    except (TypeError, ValueError):
        size = MAX_LEADERBOARD_SIZE
    return max(1, min(size, MAX_LEADERBOARD_SIZE))


def top_scores(limit=None):
    """Best entries first: waves desc, then kills desc; older scores win ties."""
    if limit is None:
        limit = leaderboard_size()
    limit = max(1, min(int(limit), MAX_LEADERBOARD_SIZE))
    rows = (
        ScoreEntry.query
        .order_by(ScoreEntry.waves.desc(), ScoreEntry.kills.desc(), ScoreEntry.timestamp.asc(), ScoreEntry.id.asc())
        .limit(limit)
        .all()
    )
    return [row.to_dict() for row in rows]


def snapshot_payload(limit=None) -> dict:
    return {'entries': top_scores(limit)}


def broadcast_top_scores() -> None:
    """Push the current leaderboard to every subscribed socket."""
    payload = snapshot_payload()
    socketio.emit('scores_snapshot', payload, to=LEADERBOARD_ROOM, namespace='/ws')
    current_app.logger.info(f"[live] pushed {len(payload['entries'])} entries to subscribers")
