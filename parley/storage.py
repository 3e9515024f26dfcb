"""Small persistent key-value store for user preferences."""

from __future__ import annotations

import json
import os
from os import PathLike
from pathlib import Path
from typing import Optional, Union


class Storage:
    """String settings kept in memory and, when a path is given, in a JSON file."""

    def __init__(self, path: Optional[Union[str, "PathLike[str]"]] = None) -> None:
        self._path = Path(path) if path is not None else None
        self._items: dict[str, str] = {}
        if self._path is not None and self._path.exists():
            data = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(data, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in data.items()
            ):
                raise ValueError("storage file must hold an object of strings")
            self._items = data

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._items.get(key, default)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value
        if self._path is not None:
            tmp = self._path.with_name(self._path.name + ".tmp")
            tmp.write_text(json.dumps(self._items, indent=2), encoding="utf-8")
            os.replace(tmp, self._path)