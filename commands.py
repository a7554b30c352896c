"""The inspection commands and the dispatcher that binds them to a source.

Every command has the signature command(backend, names, out) and writes to
the binary stream out. Errors propagate as BackendError or OSError and are
fatal for the whole invocation; the one exception is ls, which reports a
child that cannot be stat'ed and moves on.
"""

import logging
import shutil

from backend import Backend, BackendError, join
from hashsum import hash_stream
from sniff import PREFIX_SIZE, sniff
from walk import build_tree, render_tree

log = logging.getLogger(__name__)


def _println(out, text: str):
    # surrogateescape gives back the raw bytes of undecodable file names
    out.write(text.encode("utf-8", errors="surrogateescape") + b"\n")


def cat(backend: Backend, names: list[str], out):
    """Copy each file to out unchanged."""
    for name in names:
        with backend.open(name) as f:
            shutil.copyfileobj(f, out)


def _read_prefix(f, size: int) -> bytes:
    # read() may return less than asked for before EOF
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = f.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def file(backend: Backend, names: list[str], out):
    """Print 'name: mimetype' using the first bytes of each file."""
    for name in names:
        with backend.open(name) as f:
            prefix = _read_prefix(f, PREFIX_SIZE)
        _println(out, f"{name}: {sniff(prefix)}")


def hashsum(backend: Backend, names: list[str], out):
    """Print MD5, SHA1, SHA256 and SHA512 of each file."""
    for name in names:
        with backend.open(name) as f:
            digests = hash_stream(f)
        for label, digest in digests:
            _println(out, f"{label}: {digest}")


def ls(backend: Backend, names: list[str], out):
    """List directory contents, one level deep."""
    for name in names:
        entry = backend.stat(name)
        if not entry.is_dir:
            _println(out, name)
            continue
        for child_name in sorted(backend.list(name)):
            try:
                child = backend.stat(join(name, child_name))
            except (BackendError, OSError) as e:
                log.debug("stat %s failed: %s", join(name, child_name), e)
                _println(out, f"{child_name} {e}")
                continue
            _println(out, child_name + "/" if child.is_dir else child_name)


def stat(backend: Backend, names: list[str], out):
    """Print a five line status record for each path."""
    for name in names:
        entry = backend.stat(name)
        _println(out, f"Name: {entry.name}")
        _println(out, f"Size: {entry.size}")
        _println(out, f"IsDir: {'true' if entry.is_dir else 'false'}")
        _println(out, f"Mode: {entry.mode_string()}")
        _println(out, f"Modified: {entry.modified_string()}")


def tree(backend: Backend, names: list[str], out):
    """Print the contents below each path as a tree."""
    for name in names:
        _println(out, render_tree(build_tree(backend, name)))


# Maps subcommand name -> (function, help text, defaults to the root)
COMMANDS = {
    "cat": (cat, "print files", False),
    "file": (file, "determine file type", False),
    "hashsum": (hashsum, "print hashsums", False),
    "ls": (ls, "list directory contents", True),
    "stat": (stat, "display file status", False),
    "tree": (tree, "list contents of directories in a tree-like format", True),
}


def run(command: str, resolve, config, args: list[str], out):
    """Resolve the source once and run command over the resolved paths.

    resolve(config, args) returns (backend, names); the backend is closed
    when the command finishes.
    """
    func, _, default_root = COMMANDS[command]
    backend, names = resolve(config, args)
    with backend:
        if not names and default_root:
            names = ["."]
        log.debug("%s %s", command, names)
        func(backend, names, out)
