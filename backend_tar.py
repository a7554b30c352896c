"""TAR archive backend — mount .tar, .tar.gz, .tar.bz2, .tar.xz files."""

import logging
import stat as stat_mod
import tarfile
from datetime import datetime, timezone

from backend import (Backend, Entry, NotFoundError, NotADirError, NotAFileError,
                     BackendError, normalize, basename, add_parents, children_of)

log = logging.getLogger(__name__)


class TarBackend(Backend):
    """Expose the contents of a TAR archive as a read-only filesystem."""

    def __init__(self, path: str):
        try:
            self._tf = tarfile.open(path, "r:*")
        except (tarfile.TarError, FileNotFoundError, OSError) as e:
            raise BackendError(f"Cannot open TAR file: {e}") from e

        self._files: dict[str, tarfile.TarInfo] = {}
        self._dirs: dict[str, tarfile.TarInfo | None] = {".": None}

        for member in self._tf.getmembers():
            norm = normalize(member.name)
            if norm == ".":
                continue
            parents: set[str] = set()
            add_parents(parents, norm)
            for parent in parents:
                self._dirs.setdefault(parent, None)
            if member.isdir():
                self._dirs[norm] = member
            else:
                self._files[norm] = member
        log.debug("tar %s: %d files, %d directories", path, len(self._files), len(self._dirs))

    def _entry(self, name: str, member: tarfile.TarInfo) -> Entry:
        if member.isdir():
            kind = stat_mod.S_IFDIR
        elif member.issym():
            kind = stat_mod.S_IFLNK
        else:
            kind = stat_mod.S_IFREG
        return Entry(
            name=name,
            is_dir=member.isdir(),
            size=0 if member.isdir() else member.size,
            mode=kind | stat_mod.S_IMODE(member.mode),
            modified=datetime.fromtimestamp(member.mtime, tz=timezone.utc),
        )

    def stat(self, path: str) -> Entry:
        path = normalize(path)
        name = basename(path)
        if path in self._dirs:
            member = self._dirs[path]
            if member is None:
                return Entry(name=name, is_dir=True, mode=stat_mod.S_IFDIR | 0o755)
            return self._entry(name, member)
        if path in self._files:
            return self._entry(name, self._files[path])
        raise NotFoundError(f"Not found: {path}")

    def list(self, path: str) -> list[str]:
        path = normalize(path)
        if path in self._files:
            raise NotADirError(f"Not a directory: {path}")
        if path not in self._dirs:
            raise NotFoundError(f"Not found: {path}")
        return children_of(path, list(self._files) + list(self._dirs))

    def open(self, path: str):
        path = normalize(path)
        if path in self._dirs:
            raise NotAFileError(f"Not a file: {path}")
        if path not in self._files:
            raise NotFoundError(f"Not found: {path}")
        try:
            f = self._tf.extractfile(self._files[path])
        except Exception as e:
            raise BackendError(f"Error reading from TAR: {e}") from e
        if f is None:
            raise BackendError(f"Cannot read {path} (may be a link or special file)")
        return f

    def close(self):
        self._tf.close()
