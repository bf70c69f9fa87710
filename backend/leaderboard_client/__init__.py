"""Game-side leaderboard client: live top scores, offline mirror, score submission."""

from .config import ClientConfig
from .leaderboard import Leaderboard, Subscription, sort_entries
from .storage import LocalStore, StorageUnavailable

__all__ = [
    'ClientConfig',
    'Leaderboard',
    'LocalStore',
    'StorageUnavailable',
    'Subscription',
    'sort_entries',
]
