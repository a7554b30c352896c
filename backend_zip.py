"""ZIP archive backend — mount a .zip file as a read-only filesystem."""

import logging
import stat as stat_mod
import zipfile
from datetime import datetime, timezone

from backend import (Backend, Entry, NotFoundError, NotADirError, NotAFileError,
                     BackendError, normalize, basename, add_parents, children_of)

log = logging.getLogger(__name__)


def _zip_mode(zi: zipfile.ZipInfo) -> int:
    # Unix archivers store st_mode in the high 16 bits of external_attr.
    mode = zi.external_attr >> 16
    if stat_mod.S_IFMT(mode) == 0:
        mode |= stat_mod.S_IFREG
    if stat_mod.S_IMODE(mode) == 0:
        mode |= 0o644
    return mode


def _zip_time(zi: zipfile.ZipInfo) -> datetime:
    try:
        return datetime(*zi.date_time, tzinfo=timezone.utc)
    except ValueError:
        return datetime(1980, 1, 1, tzinfo=timezone.utc)


class ZipBackend(Backend):
    """Expose the contents of a ZIP archive as a read-only filesystem."""

    def __init__(self, path: str):
        try:
            self._zf = zipfile.ZipFile(path, "r")
        except (zipfile.BadZipFile, FileNotFoundError, OSError) as e:
            raise BackendError(f"Cannot open ZIP file: {e}") from e

        # ZIP files don't always have explicit directory entries, so we infer
        # directories from file paths.
        self._files: dict[str, zipfile.ZipInfo] = {}
        self._dirs: dict[str, zipfile.ZipInfo | None] = {".": None}

        for zi in self._zf.infolist():
            norm = normalize(zi.filename)
            if norm == ".":
                continue
            parents: set[str] = set()
            add_parents(parents, norm)
            for parent in parents:
                self._dirs.setdefault(parent, None)
            if zi.is_dir():
                self._dirs[norm] = zi
            else:
                self._files[norm] = zi
        log.debug("zip %s: %d files, %d directories", path, len(self._files), len(self._dirs))

    def stat(self, path: str) -> Entry:
        path = normalize(path)
        name = basename(path)
        if path in self._dirs:
            zi = self._dirs[path]
            if zi is None:
                return Entry(name=name, is_dir=True, mode=stat_mod.S_IFDIR | 0o755)
            mode = stat_mod.S_IMODE(zi.external_attr >> 16) or 0o755
            return Entry(name=name, is_dir=True, mode=stat_mod.S_IFDIR | mode,
                         modified=_zip_time(zi))
        if path in self._files:
            zi = self._files[path]
            return Entry(name=name, is_dir=False, size=zi.file_size,
                         mode=_zip_mode(zi), modified=_zip_time(zi))
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
            return self._zf.open(self._files[path], "r")
        except Exception as e:
            raise BackendError(f"Error reading from ZIP: {e}") from e

    def close(self):
        self._zf.close()

