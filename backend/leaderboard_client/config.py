import os
from dataclasses import dataclass, field
from typing import Optional


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        return default


@dataclass
class ClientConfig:
    # Base URL of the leaderboard server; scores are POSTed to <api_url>/submitScore
    api_url: str = field(default_factory=lambda: os.environ.get('NEON_API_URL', 'http://127.0.0.1:5000'))
    # Socket.IO server for live top scores. Empty means local scores only.
    realtime_url: Optional[str] = field(default_factory=lambda: os.environ.get('NEON_REALTIME_URL') or None)
    storage_path: str = field(default_factory=lambda: os.environ.get(
        'NEON_STORAGE_PATH', os.path.join(os.path.expanduser('~'), '.neon_defense', 'storage.json')))
    submit_timeout_sec: float = field(default_factory=lambda: _env_float('NEON_SUBMIT_TIMEOUT_SEC', 5.0))
    connect_timeout_sec: float = field(default_factory=lambda: _env_float('NEON_CONNECT_TIMEOUT_SEC', 5.0))

    @property
    def submit_url(self) -> str:
        return self.api_url.rstrip('/') + '/submitScore'
