"""Byte-prefix MIME type detection for the `file` command."""

import codecs

import filetype

# How many bytes of a file the `file` command reads.
PREFIX_SIZE = 8192

# C0 controls other than tab, newline, vertical tab, form feed, carriage return and escape.
_CONTROL = frozenset(b for b in range(0x20) if b not in b"\t\n\x0b\x0c\r\x1b") | {0x7f}


def is_text(data: bytes) -> bool:
    """Check whether data looks like UTF-8 text.

    The prefix may end in the middle of a multi-byte sequence, which is
    not an error.
    """
    if any(b in _CONTROL for b in data):
        return False
    try:
        codecs.getincrementaldecoder("utf-8")().decode(data, final=False)
    except UnicodeDecodeError:
        return False
    return True


def sniff(prefix: bytes) -> str:
    """Return the MIME type for a byte prefix."""
    if not prefix:
        return "application/x-empty"
    mime = filetype.guess_mime(prefix)
    if mime:
        return mime
    if is_text(prefix):
        return "text/plain"
    return "application/octet-stream"
