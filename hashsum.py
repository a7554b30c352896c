"""Compute several digests over a single pass of a byte stream."""

import hashlib
import shutil

# Fixed output order.
ALGORITHMS = [
    ("MD5", "md5"),
    ("SHA1", "sha1"),
    ("SHA256", "sha256"),
    ("SHA512", "sha512"),
]

CHUNK_SIZE = 64 * 1024


class MultiHash:
    """Write-only sink that feeds every chunk to all digests in lock step."""

    def __init__(self, algorithms=ALGORITHMS):
        self._hashes = [
            (label, hashlib.new(name, usedforsecurity=False)) for label, name in algorithms
        ]

    def write(self, data: bytes) -> int:
        for _, h in self._hashes:
            h.update(data)
        return len(data)

    def hexdigests(self) -> list[tuple[str, str]]:
        """Return (label, lowercase hex digest) pairs in algorithm order."""
        return [(label, h.hexdigest()) for label, h in self._hashes]


def hash_stream(stream) -> list[tuple[str, str]]:
    """Read stream to the end and return its digests."""
    sink = MultiHash()
    shutil.copyfileobj(stream, sink, CHUNK_SIZE)
    return sink.hexdigests()
