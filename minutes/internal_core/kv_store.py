from __future__ import annotations

"""
Durable string key-value stores backing draft persistence.

Design intent:
- Mirror the browser storage contract: string keys, string values, absent means None.
- Keep the file backend crash-safe with write-then-rename.
"""

import json
import logging
import os
from pathlib import Path
from threading import RLock
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class InMemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._lock = RLock()
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._items)


class JsonFileKeyValueStore:
    """All entries live in one JSON object file, rewritten on every change."""

    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = RLock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to read key-value file: %s error=%s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring non-object key-value file: %s", self._path)
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _write_all(self, items: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._path.with_name(self._path.name + ".tmp")
        temp_path.write_text(json.dumps(items, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(temp_path, self._path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._read_all()
            items[key] = str(value)
            self._write_all(items)

    def remove_item(self, key: str) -> None:
        with self._lock:
            items = self._read_all()
            if key not in items:
                return
            del items[key]
            self._write_all(items)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._read_all())
