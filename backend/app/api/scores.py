import json

from flask import Blueprint, jsonify, request, current_app

from app import score_store
from app.services.scores.errors import ScoreServiceError
from app.services.scores.live import broadcast_top_scores
from app.services.scores.validation import (
    FAILED_SANITY,
    Rejection,
    passes_sanity_check,
    validate_submission,
)


scores = Blueprint('scores', __name__)

_TEXT = {'Content-Type': 'text/plain; charset=utf-8'}


def _text(body: str, status: int, **headers):
    return body, status, {**_TEXT, **headers}


@scores.app_errorhandler(405)
def method_not_allowed(exc):
    # Routing rejects the method before the view runs, so every non-POST
    # verb on /submitScore lands here
    if request.path == '/submitScore':
        return _text('Method Not Allowed', 405, Allow='POST')
    return exc


@scores.route('/submitScore', methods=['POST'])
def submit_score():
    """Validate a finished run and append it to the leaderboard.

    The only write path into ``scores``; date and timestamp come from the
    server, never from the body.
    """
    try:
        raw = request.get_data(as_text=True)
        try:
            body = json.loads(raw) if raw.strip() else {}
        except (ValueError, RecursionError):
            return _text('Bad JSON', 400)
        if not isinstance(body, dict):
            return _text('Bad JSON', 400)

        result = validate_submission(body)
        if isinstance(result, Rejection):
            current_app.logger.info(f"[submit] rejected: {result.reason}")
            return _text(result.reason, 400)
        if not passes_sanity_check(result):
            current_app.logger.info(f"[submit] sanity check failed waves={result.waves} kills={result.kills}")
            return _text(FAILED_SANITY, 400)

        entry = score_store.append_score(result)
        current_app.logger.info(f"[submit] stored key={entry.key} name={entry.name!r} waves={entry.waves} kills={entry.kills}")
    except ScoreServiceError as exc:
        current_app.logger.error(f"[submit] store error: {exc}")
        return _text('Server error', 500)
    except Exception:
        current_app.logger.exception("[submit] unexpected error")
        return _text('Server error', 500)

    try:
        broadcast_top_scores()
    except Exception as exc:
        current_app.logger.warning(f"[live] broadcast after submit failed: {exc}")

    return jsonify({'ok': True})
