"""Snapshot persistence for the folder tree.

The whole tree is stored as one JSON value under a single key. Loading never
fails: a missing value yields the default tree, and an unreadable one yields
the default tree flagged as corrupted.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

from loguru import logger

from topmarks.layers.folders import Tree, default_tree
from topmarks.layers.layer import Folder

STORAGE_KEY = "topmarks-folders"


class KeyValueStorage(Protocol):
    """Minimal durable string store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """In-process storage; contents are lost with the object."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStorage:
    """One file per key inside a directory.

    Writes go to a temporary file that is then moved over the old one, so a
    crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory).expanduser()
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


def dumps_tree(folders: Tree) -> str:
    return json.dumps([f.to_dict() for f in folders])


def loads_tree(blob: str) -> Tree:
    """Deserialize a stored tree.

    Raises:
        ValueError: If the blob is not JSON or not a list of folders.
    """
    data = json.loads(blob)
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of folders, got {type(data).__name__}")
    return tuple(Folder.from_dict(item) for item in data)


class TreePersistence:
    """Reads and writes the folder tree under one well-known key."""

    def __init__(self, storage: KeyValueStorage, key: str = STORAGE_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> tuple[Tree, bool]:
        """Restore the stored tree.

        Returns:
            (folders, was_corrupted). The folders always contain at least one
            Folder; was_corrupted is True only when a stored value existed but
            could not be read.
        """
        try:
            blob = self.storage.get(self.key)
            if blob is None:
                return default_tree(), False
            folders = loads_tree(blob)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError and UnicodeDecodeError are ValueErrors; deep nesting recurses
            logger.error(f"Failed to load folders from {self.key!r}: {e}")
            return default_tree(), True
        if not folders:
            return default_tree(), False
        return folders, False

    def save(self, folders: Tree) -> None:
        """Replace the stored value with a full snapshot of the tree."""
        self.storage.set(self.key, dumps_tree(folders))
