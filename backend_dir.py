"""Directory backend — expose a directory on disk as a read-only filesystem."""

import os
import stat as stat_mod
from datetime import datetime, timezone

from backend import (Backend, Entry, NotFoundError, NotADirError, NotAFileError,
                     BackendError, basename, normalize, split)


class DirBackend(Backend):
    """Expose a local directory tree, rooted at root, as a read-only filesystem."""

    def __init__(self, root: str):
        self.root = os.path.abspath(root)
        if not os.path.isdir(self.root):
            raise BackendError(f"Not a directory: {root}")

    def _real(self, path: str) -> str:
        # split() drops '.' segments; '..' is treated as a missing name.
        parts = split(path)
        if ".." in parts:
            raise NotFoundError(f"Not found: {path}")
        return os.path.join(self.root, *parts)

    def stat(self, path: str) -> Entry:
        try:
            st = os.stat(self._real(path))
        except FileNotFoundError as e:
            raise NotFoundError(f"Not found: {path}") from e
        except OSError as e:
            raise BackendError(f"Cannot stat {path}: {e.strerror}") from e
        return Entry(
            name=basename(normalize(path)),
            is_dir=stat_mod.S_ISDIR(st.st_mode),
            size=st.st_size,
            mode=st.st_mode,
            modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    def list(self, path: str) -> list[str]:
        real = self._real(path)
        try:
            return os.listdir(real)
        except FileNotFoundError as e:
            raise NotFoundError(f"Not found: {path}") from e
        except NotADirectoryError as e:
            raise NotADirError(f"Not a directory: {path}") from e
        except OSError as e:
            raise BackendError(f"Cannot list {path}: {e.strerror}") from e

    def open(self, path: str):
        real = self._real(path)
        if os.path.isdir(real):
            raise NotAFileError(f"Not a file: {path}")
        try:
            return open(real, "rb")
        except FileNotFoundError as e:
            raise NotFoundError(f"Not found: {path}") from e
        except OSError as e:
            raise BackendError(f"Cannot open {path}: {e.strerror}") from e
