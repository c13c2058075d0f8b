"""Local key/value storage for the storefront.

Plays the part of the browser's local storage: string keys mapped to string
values, flushed to a single JSON file after every write. With no path the
storage lives only in memory, which is what the tests use.
"""
import json
import logging
import os
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._items: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path or not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("Could not read local storage at %s, starting empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Local storage at %s is not a mapping, starting empty", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self):
        if not self.path:
            return
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._items, f)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self._items[key] = value
        self._flush()

    def remove_item(self, key: str):
        if self._items.pop(key, None) is not None:
            self._flush()

    def clear(self):
        self._items = {}
        self._flush()

    def keys(self):
        return list(self._items)
