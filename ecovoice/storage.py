# ecovoice/storage.py
# Local key-value persistence: one serialized value per key.
import logging
from pathlib import Path
from threading import Lock
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    def __init__(self, initial: Dict[str, str] = None):
        self._data = dict(initial or {})

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value

    def delete(self, key):
        self._data.pop(key, None)


class JsonFileStore:
    """Keeps each key in ``<data_dir>/<key>.json``."""

    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(exist_ok=True, parents=True)
        self._lock = Lock()

    def _path(self, key):
        return self.data_dir / f"{key}.json"

    def get(self, key):
        p = self._path(key)
        if not p.exists():
            return None
        with p.open("r", encoding="utf-8") as f:
            return f.read()

    def set(self, key, value):
        p = self._path(key)
        tmp = p.with_suffix(".tmp")
        with self._lock:
            with tmp.open("w", encoding="utf-8") as f:
                f.write(value)
            tmp.replace(p)
        logger.debug("wrote %s (%d bytes)", p, len(value))

    def delete(self, key):
        with self._lock:
            self._path(key).unlink(missing_ok=True)
