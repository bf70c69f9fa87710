import json
import threading
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ConfigurationMissing, PersistenceFailure
from .validation import ValidScore


class ScoreStore:
    """Write-only access to the ``scores`` table.

    The store owns its own engine, built from ``SCORES_DATABASE_URL`` and the
    ``SCORES_SERVICE_ACCOUNT`` credential. The engine is created on the first
    append, once per process; the rest of the application never needs the
    credential.
    """

    def __init__(self, app=None):
        self._app = None
        self._engine: Optional[Engine] = None
        self._lock = threading.Lock()
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self._app = app
        app.extensions['score_store'] = self

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    def _build_engine(self) -> Engine:
        if self._app is None:
            raise ConfigurationMissing('ScoreStore is not bound to an application')
        cfg = self._app.config
        raw = cfg.get('SCORES_SERVICE_ACCOUNT')
        database_url = cfg.get('SCORES_DATABASE_URL')
        if not raw or not database_url:
            raise ConfigurationMissing('Missing SCORES_SERVICE_ACCOUNT or SCORES_DATABASE_URL')

        try:
            account = json.loads(raw) if isinstance(raw, str) else raw
        except ValueError as exc:
            raise ConfigurationMissing('SCORES_SERVICE_ACCOUNT is not valid JSON') from exc
        if not isinstance(account, dict):
            raise ConfigurationMissing('SCORES_SERVICE_ACCOUNT must be a JSON object')

        try:
            url = make_url(database_url)
        except ArgumentError as exc:
            raise ConfigurationMissing('SCORES_DATABASE_URL is not a database URL') from exc
        if account.get('username'):
            url = url.set(username=account['username'], password=account.get('password'))

        engine = create_engine(url)
        self._app.logger.info(
            f"[store] connected to {url.get_backend_name()} as {account.get('username') or account.get('client_email') or 'default'}"
        )
        return engine

    def _ensure_initialized(self) -> Engine:
        engine = self._engine
        if engine is not None:
            return engine
        with self._lock:
            if self._engine is None:
                self._engine = self._build_engine()
            return self._engine

    def append_score(self, score: ValidScore):
        """Append one record, stamping its key, date and timestamp.

        Raises ConfigurationMissing when the store cannot be initialized and
        PersistenceFailure when the database write fails.
        """
        from app.models import ScoreEntry

        engine = self._ensure_initialized()
        now = datetime.now(timezone.utc)
        entry = ScoreEntry(
            key=uuid.uuid4().hex,
            date=now.strftime('%Y-%m-%d'),
            timestamp=int(now.timestamp() * 1000),
            **score.to_dict(),
        )
        try:
            with Session(engine, expire_on_commit=False) as session:
                session.add(entry)
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f'append to scores failed: {exc.__class__.__name__}') from exc
        return entry

    def dispose(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
