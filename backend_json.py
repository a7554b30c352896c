"""JSON file backend — mount a .json file as a read-only filesystem.

Structure:
    dict keys   -> directories (if value is dict/list) or files (if scalar)
    list indices -> directory entries named "0", "1", ...
    scalars     -> files containing the string representation
"""

import io
import json
import os
import stat as stat_mod
from datetime import datetime, timezone

from backend import (Backend, Entry, NotFoundError, NotADirError, NotAFileError,
                     BackendError, basename, is_segment, normalize, split)


class JsonBackend(Backend):
    """Expose a JSON file as a read-only filesystem."""

    def __init__(self, path: str):
        try:
            with open(path, "r", encoding="utf-8") as f:
                self._root = json.load(f)
            mtime = os.stat(path).st_mtime
        except (json.JSONDecodeError, FileNotFoundError, OSError) as e:
            raise BackendError(f"Cannot read JSON file: {e}") from e

        if not isinstance(self._root, (dict, list)):
            raise BackendError("JSON root must be a dict or list")
        # Every node inherits the document's modification time.
        self._modified = datetime.fromtimestamp(mtime, tz=timezone.utc)

    @staticmethod
    def _child(node, part: str):
        if isinstance(node, dict):
            return node[part]
        if isinstance(node, list) and part.isdigit():
            return node[int(part)]
        raise KeyError(part)

    def _resolve(self, path: str):
        node = self._root
        try:
            for part in split(path):
                node = self._child(node, part)
        except (KeyError, IndexError, ValueError):
            raise NotFoundError(f"Not found: {path}") from None
        return node

    def _to_bytes(self, node) -> bytes:
        if node is None:
            return b"null"
        if isinstance(node, bool):
            return b"true" if node else b"false"
        return str(node).encode("utf-8")

    def stat(self, path: str) -> Entry:
        node = self._resolve(path)
        name = basename(normalize(path))
        if isinstance(node, (dict, list)):
            return Entry(name=name, is_dir=True, mode=stat_mod.S_IFDIR | 0o555,
                         modified=self._modified)
        data = self._to_bytes(node)
        return Entry(name=name, is_dir=False, size=len(data),
                     mode=stat_mod.S_IFREG | 0o444, modified=self._modified)

    def list(self, path: str) -> list[str]:
        node = self._resolve(path)
        if isinstance(node, dict):
            # Keys such as "" or "a/b" cannot be addressed by a path.
            return [key for key in node if is_segment(key)]
        if isinstance(node, list):
            return [str(i) for i in range(len(node))]
        raise NotADirError(f"Not a directory: {path}")

    def open(self, path: str):
        node = self._resolve(path)
        if isinstance(node, (dict, list)):
            raise NotAFileError(f"Not a file: {path}")
        return io.BytesIO(self._to_bytes(node))
