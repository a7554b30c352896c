"""CLI entry point for fs — unix-like inspection commands for directories and archives."""

import argparse
import logging
import os
import sys
from dataclasses import dataclass

from backend import Backend, BackendError
from commands import COMMANDS, run

log = logging.getLogger(__name__)

# Maps source type -> (module, class)
SOURCES = {
    "dir": ("backend_dir", "DirBackend"),
    "zip": ("backend_zip", "ZipBackend"),
    "tar": ("backend_tar", "TarBackend"),
    "json": ("backend_json", "JsonBackend"),
}

# Extension -> source type for auto-detection
EXT_MAP = {
    ".zip": "zip",
    ".tar": "tar", ".tar.gz": "tar", ".tgz": "tar",
    ".tar.bz2": "tar", ".tbz2": "tar", ".tar.xz": "tar", ".txz": "tar",
    ".json": "json",
}


class ResolveError(Exception):
    """The source argument could not be turned into a backend."""
    pass


@dataclass
class Config:
    source: str = "."
    source_type: str | None = None
    debug: bool = False


def detect_source_type(path: str) -> str:
    """Detect the source type from a path on disk."""
    if os.path.isdir(path):
        return "dir"
    lower = path.lower()
    for ext in sorted(EXT_MAP, key=len, reverse=True):
        if lower.endswith(ext):
            return EXT_MAP[ext]
    raise ResolveError(
        f"Cannot detect source type for '{path}'. "
        f"Supported extensions: {', '.join(sorted(EXT_MAP))}"
    )


def load_backend(path: str, source_type: str) -> Backend:
    """Load a backend by source type for the given path."""
    if source_type not in SOURCES:
        raise ResolveError(f"Unknown source type: {source_type}")
    mod_name, cls_name = SOURCES[source_type]
    module = __import__(mod_name)
    return getattr(module, cls_name)(path)


def resolve_source(config: Config, args: list[str]) -> tuple[Backend, list[str]]:
    """Open the configured source.

    Path arguments are passed on as typed, so commands can echo them;
    every backend normalizes paths itself.
    """
    if not os.path.exists(config.source):
        raise ResolveError(f"{config.source} not found")
    source_type = config.source_type or detect_source_type(config.source)
    log.debug("opening %s as %s", config.source, source_type)
    try:
        backend = load_backend(config.source, source_type)
    except BackendError as e:
        raise ResolveError(str(e)) from e
    return backend, list(args)


# Module loggers the debug switch applies to.
LOGGERS = ["backend_dir", "backend_json", "backend_tar", "backend_zip", "commands", "fscmd", "walk"]

_handler: logging.Handler | None = None


def configure_logging(config: Config):
    """Send this tool's debug output to stderr when debugging, otherwise drop it.

    Only the tool's own loggers are touched; other loggers in the process
    keep their configuration.
    """
    global _handler
    loggers = [logging.getLogger(name) for name in LOGGERS]
    if _handler is not None:
        for logger in loggers:
            logger.removeHandler(_handler)
        _handler = None

    if not config.debug:
        for logger in loggers:
            logger.setLevel(logging.CRITICAL + 1)
            logger.propagate = True
        return

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter("%(asctime)s %(pathname)s:%(lineno)d: %(message)s"))
    for logger in loggers:
        logger.setLevel(logging.DEBUG)
        logger.addHandler(_handler)
        logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fs",
        description="fs — recursive file, filesystem and archive commands"
    )
    parser.add_argument("-s", "--source", default=".",
                        help="Directory or archive to inspect (default: current directory)")
    parser.add_argument("-t", "--type", dest="source_type", choices=sorted(SOURCES),
                        help="Force source type")
    parser.add_argument("-d", "--debug", action="store_true", help=argparse.SUPPRESS)

    sub = parser.add_subparsers(dest="command")
    for name, (_, help_text, _) in COMMANDS.items():
        p = sub.add_parser(name, help=help_text)
        p.add_argument("paths", nargs="*", help="Paths inside the source")
    return parser


def main(argv=None, resolver=resolve_source, out=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = Config(
        source=args.source,
        source_type=args.source_type,
        debug=args.debug or os.environ.get("FS_DEBUG", "") not in ("", "0"),
    )
    configure_logging(config)

    if out is None:
        out = sys.stdout.buffer
    try:
        run(args.command, resolver, config, args.paths, out)
    except (ResolveError, BackendError, OSError) as e:
        log.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        out.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
