"""
Small persistent key/value store for the game client.

Plays the role browser storage plays for the web build: string values
under fixed keys, kept in one JSON file. Everything stored here is
disposable; a missing or unreadable file reads as empty.
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Optional


class StorageUnavailable(Exception):
    """The backing file could not be read or written."""


class LocalStore:
    def __init__(self, path: str):
        self.path = path

    def _load(self) -> dict[str, str]:
        try:
            with open(self.path, 'r', encoding='utf-8') as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except ValueError:
            # Corrupt file: treat as empty, the next write replaces it
            return {}
        except OSError as exc:
            raise StorageUnavailable(str(exc)) from exc
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._write_all(data)

    def _write_all(self, data: dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.storage-', suffix='.json')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                    json.dump(data, fh, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as exc:
            raise StorageUnavailable(str(exc)) from exc
