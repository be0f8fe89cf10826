from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from .repository import KeyValueStorage

logger = logging.getLogger(__name__)


class JsonFileStorage(KeyValueStorage):
    """All keys live in one JSON object on disk.

    Every write rewrites the whole file through a temp file + os.replace, so a
    crash never leaves a half-written store behind.
    """

    def __init__(self, path: Path | str):
        self._path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        text = self._path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Storage file %s is not valid JSON; treating it as empty", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s does not hold an object; treating it as empty", self._path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, items: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(json.dumps(items, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, self._path)

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = str(value)
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if key in items:
            del items[key]
            self._write_all(items)
