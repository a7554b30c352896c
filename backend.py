"""Base backend interface and in-memory reference implementation."""

import io
import stat as stat_mod
from dataclasses import dataclass
from datetime import datetime, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class Entry:
    """Metadata about a resource (file or directory)."""
    name: str
    is_dir: bool
    size: int = 0
    mode: int = 0o444
    modified: datetime = EPOCH

    def mode_string(self) -> str:
        """Permission string in `ls -l` form, e.g. '-rw-r--r--'."""
        mode = self.mode
        if self.is_dir and not stat_mod.S_ISDIR(mode):
            mode |= stat_mod.S_IFDIR
        elif not self.is_dir and stat_mod.S_IFMT(mode) == 0:
            mode |= stat_mod.S_IFREG
        return stat_mod.filemode(mode)

    def modified_string(self) -> str:
        """Timestamp with zone, e.g. '1970-01-01 00:00:00 +0000 UTC'."""
        modified = self.modified
        if modified.tzinfo is None:
            modified = modified.replace(tzinfo=timezone.utc)
        return modified.strftime("%Y-%m-%d %H:%M:%S %z %Z")


class BackendError(Exception):
    """Base error for backend operations."""
    pass


class NotFoundError(BackendError):
    """Resource does not exist."""
    pass


class NotADirError(BackendError):
    """Resource exists but is not a directory."""
    pass


class NotAFileError(BackendError):
    """Resource exists but is a directory."""
    pass


class Backend:
    """Abstract read-only filesystem interface.

    Paths are '/'-separated and relative; '.' is the root, which is
    always a directory.
    """

    def stat(self, path: str) -> Entry:
        """Return metadata for the resource at path."""
        raise NotImplementedError

    def list(self, path: str) -> list[str]:
        """Return child names for a directory. Raises NotADirError for files."""
        raise NotImplementedError

    def open(self, path: str):
        """Return a binary file object for a file. Raises NotAFileError for directories."""
        raise NotImplementedError

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def normalize(path: str) -> str:
    """Normalize a path: no leading / or ./, no trailing /, collapse doubles.

    The empty path and '/' both become '.'.
    """
    parts = [p for p in path.split("/") if p and p != "."]
    if not parts:
        return "."
    return "/".join(parts)


def join(parent: str, name: str) -> str:
    """Join a child name onto a path with a single separator."""
    if parent in ("", "."):
        return name
    return parent.rstrip("/") + "/" + name


def is_segment(name: str) -> bool:
    """Check whether name can be used as a single path segment."""
    return name not in ("", ".", "..") and "/" not in name


def basename(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[-1] or "."


def split(path: str) -> list[str]:
    """Split a normalized path into segments; the root has none."""
    path = normalize(path)
    if path == ".":
        return []
    return path.split("/")


def add_parents(dirs: set[str], path: str):
    """Register every ancestor directory of path in dirs."""
    parts = split(path)
    for i in range(1, len(parts)):
        dirs.add("/".join(parts[:i]))


def children_of(path: str, candidates) -> list[str]:
    """Names of the candidates that sit directly below path."""
    prefix = "" if path == "." else path + "/"
    children = set()
    for cpath in candidates:
        if cpath != "." and cpath.startswith(prefix):
            rest = cpath[len(prefix):]
            if rest and "/" not in rest:
                children.add(rest)
    return sorted(children)


class MemoryBackend(Backend):
    """In-memory backend backed by a nested dict.

    Structure: nested dicts are directories, bytes/str values are files.
    String values are encoded to UTF-8 bytes on read.

    Example:
        MemoryBackend({
            "readme.txt": "Hello, world!",
            "docs": {
                "guide.txt": "A guide",
            }
        })
    """

    def __init__(self, tree: dict, modified: datetime = EPOCH):
        self._tree = tree
        self._modified = modified

    def _resolve(self, path: str):
        """Walk the tree to find the node at path. Returns the node or raises NotFoundError."""
        node = self._tree
        for part in split(path):
            if not isinstance(node, dict) or part not in node:
                raise NotFoundError(f"Not found: {path}")
            node = node[part]
        return node

    @staticmethod
    def _data(node) -> bytes:
        return node.encode("utf-8") if isinstance(node, str) else node

    def stat(self, path: str) -> Entry:
        node = self._resolve(path)
        name = basename(normalize(path))
        if isinstance(node, dict):
            return Entry(name=name, is_dir=True, mode=stat_mod.S_IFDIR | 0o555,
                         modified=self._modified)
        return Entry(name=name, is_dir=False, size=len(self._data(node)),
                     mode=stat_mod.S_IFREG | 0o444, modified=self._modified)

    def list(self, path: str) -> list[str]:
        node = self._resolve(path)
        if not isinstance(node, dict):
            raise NotADirError(f"Not a directory: {path}")
        return [name for name in node if is_segment(name)]

    def open(self, path: str):
        node = self._resolve(path)
        if isinstance(node, dict):
            raise NotAFileError(f"Not a file: {path}")
        return io.BytesIO(self._data(node))
