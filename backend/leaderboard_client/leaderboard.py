"""
Leaderboard client for the game.

Reads the global top scores through a live Socket.IO subscription and
submits finished runs to the server's ``/submitScore`` endpoint. A local
mirror of the best 25 runs is kept on disk so the player always sees their
own scores, even offline.

Mirror policy: every submission is written to the mirror before the network
call. If the server explicitly rejects it (HTTP 400) the entry is removed
again; on network errors or server failures it stays.
"""

from __future__ import annotations

import json
import logging
import math
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

import requests
import socketio

from .config import ClientConfig
from .storage import LocalStore, StorageUnavailable

logger = logging.getLogger(__name__)

MAX_ENTRIES = 25
NAME_MAX_LEN = 20
NAMESPACE = '/ws'

NAME_KEY = 'neonDefenseName'
SCORES_KEY = 'neonDefenseHighscores'

Listener = Callable[[list], None]


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _rank_key(entry: dict) -> tuple[float, float]:
    return (-_number(entry.get('waves')), -_number(entry.get('kills')))


def sort_entries(entries: Iterable[dict], limit: int = MAX_ENTRIES) -> list[dict]:
    """Waves descending, then kills descending, capped at ``limit``.

    The sort is stable: equal runs keep their incoming order, so the
    server's oldest-first order and the mirror's insertion order win ties.
    """
    ranked = sorted((e for e in entries if isinstance(e, dict)), key=_rank_key)
    return ranked[:limit]


def _floor_or_zero(value: Any) -> int:
    return math.floor(_number(value))


class Subscription:
    """Handle returned by :meth:`Leaderboard.on_update`."""

    def __init__(self, board: 'Leaderboard', listener: Listener):
        self._board = board
        self.listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._board._remove_listener(self)
            self.active = False


class Leaderboard:
    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        store: Optional[LocalStore] = None,
        session: Optional[requests.Session] = None,
        sio: Optional[socketio.Client] = None,
    ):
        self.config = config or ClientConfig()
        self.store = store or LocalStore(self.config.storage_path)
        self.session = session or requests.Session()
        self._sio = sio
        self._live = False
        self._entries: list[dict] = []
        self._subscriptions: list[Subscription] = []
        self._last_player_name = ''
        # Guards entry replacement and listener notification as one step
        self._lock = threading.RLock()

    # -- init ---------------------------------------------------------------

    def init(self) -> bool:
        """Load the cached name and try to go live.

        Returns True when the live subscription is up, False when running
        on local scores only.
        """
        try:
            self._last_player_name = self.store.get_item(NAME_KEY) or ''
        except StorageUnavailable as exc:
            logger.debug('Leaderboard: could not read cached name: %s', exc)

        if not self.config.realtime_url:
            logger.info('Leaderboard: realtime server not configured, using local scores only.')
            self._load_local_scores()
            return False

        sio = None
        try:
            sio = self._sio or socketio.Client()
            sio.on('scores_snapshot', self._handle_snapshot, namespace=NAMESPACE)
            sio.on('error', self._handle_remote_error, namespace=NAMESPACE)
            sio.connect(
                self.config.realtime_url,
                namespaces=[NAMESPACE],
                wait_timeout=self.config.connect_timeout_sec,
            )
            sio.emit('subscribe_scores', {'limit': MAX_ENTRIES}, namespace=NAMESPACE)
        except Exception as exc:
            logger.warning('Leaderboard: live connection failed, using local scores. %s', exc)
            if sio is not None:
                # A half-open connection must not push snapshots over local scores
                try:
                    sio.disconnect()
                except Exception as disconnect_exc:
                    logger.debug('Leaderboard: disconnect failed: %s', disconnect_exc)
            self._live = False
            self._load_local_scores()
            return False

        self._sio = sio
        self._live = True
        return True

    def close(self) -> None:
        if self._sio is not None and self._live:
            try:
                self._sio.disconnect()
            except Exception as exc:
                logger.debug('Leaderboard: disconnect failed: %s', exc)
        self._live = False

    # -- live updates -------------------------------------------------------

    def _handle_snapshot(self, data: Any) -> None:
        entries = data.get('entries') if isinstance(data, dict) else None
        if not isinstance(entries, list):
            logger.warning('Leaderboard: ignoring malformed snapshot')
            return
        self._replace(sort_entries(entries))

    def _handle_remote_error(self, data: Any) -> None:
        logger.warning('Leaderboard listener error: %s', data)

    def _replace(self, entries: list[dict]) -> None:
        with self._lock:
            self._entries = entries
            self._notify(entries)

    def _notify(self, entries: list[dict]) -> None:
        for subscription in list(self._subscriptions):
            try:
                subscription.listener(entries)
            except Exception:
                logger.exception('Leaderboard: listener failed')

    # -- submit -------------------------------------------------------------

    def submit_score(self, data: dict) -> bool:
        """Submit a finished run. True only when the server accepted it."""
        name = str(data.get('name') or '').strip()
        waves = data.get('waves')
        if not name or len(name) > NAME_MAX_LEN:
            return False
        if isinstance(waves, bool) or not isinstance(waves, (int, float)):
            return False
        if not math.isfinite(waves) or waves < 1:
            return False

        try:
            self.store.set_item(NAME_KEY, name)
        except StorageUnavailable as exc:
            logger.debug('Leaderboard: could not cache name: %s', exc)
        self._last_player_name = name

        # date/timestamp are assigned by the server
        entry = {
            'name': name,
            'waves': math.floor(waves),
            'kills': _floor_or_zero(data.get('kills')),
            'towers_built': _floor_or_zero(data.get('towers_built')),
            'towers_lost': _floor_or_zero(data.get('towers_lost')),
            'time_s': _floor_or_zero(data.get('time_s')),
        }
        now = datetime.now(timezone.utc)
        local_entry = {
            **entry,
            'date': now.strftime('%Y-%m-%d'),
            'timestamp': int(now.timestamp() * 1000),
        }
        self._save_local_score(local_entry)

        try:
            res = self.session.post(
                self.config.submit_url,
                json=entry,
                timeout=self.config.submit_timeout_sec,
            )
        except requests.RequestException as exc:
            logger.warning('Leaderboard: failed to submit score to server: %s', exc)
            return False

        if res.ok:
            return True

        logger.warning('Leaderboard: server rejected score: %s %s', res.status_code, res.text)
        if res.status_code == 400:
            self._drop_local_score(local_entry)
        return False

    # -- getters ------------------------------------------------------------

    def get_leaderboard(self) -> list[dict]:
        return self._entries

    def is_available(self) -> bool:
        return self._live or len(self._entries) > 0

    @property
    def last_player_name(self) -> str:
        return self._last_player_name

    # -- listeners ----------------------------------------------------------

    def on_update(self, listener: Listener) -> Subscription:
        subscription = Subscription(self, listener)
        with self._lock:
            self._subscriptions = self._subscriptions + [subscription]
        return subscription

    def _remove_listener(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s is not subscription]

    # -- local mirror -------------------------------------------------------

    def _read_mirror(self) -> list[dict]:
        try:
            raw = self.store.get_item(SCORES_KEY)
        except StorageUnavailable as exc:
            logger.debug('Leaderboard: local scores unavailable: %s', exc)
            return []
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            return []
        return [e for e in data if isinstance(e, dict)] if isinstance(data, list) else []

    def _write_mirror(self, entries: list[dict]) -> bool:
        try:
            self.store.set_item(SCORES_KEY, json.dumps(entries))
        except StorageUnavailable as exc:
            logger.debug('Leaderboard: could not save local scores: %s', exc)
            return False
        return True

    def _load_local_scores(self) -> None:
        self._replace(sort_entries(self._read_mirror()))

    def _save_local_score(self, entry: dict) -> None:
        with self._lock:
            top = sort_entries(self._read_mirror() + [entry])
            self._write_mirror(top)
            if not self._live:
                self._replace(top)

    def _drop_local_score(self, entry: dict) -> None:
        with self._lock:
            scores = self._read_mirror()
            if entry not in scores:
                return
            scores.remove(entry)
            top = sort_entries(scores)
            self._write_mirror(top)
            if not self._live:
                self._replace(top)
