"""
Logging configuration for the devshell CLI.

``setup_logging()`` runs once from the click group callback; every
module just does ``logger = logging.getLogger(__name__)``.

Console level precedence:
    --debug / --verbose / --quiet  >  DEVSHELL_LOG_LEVEL  >  WARNING

Log output goes to stderr so ``devshell shell-hook`` and
``devshell library-path`` stay clean for ``eval`` and ``$(...)``.
DEVSHELL_LOG_FILE adds a file handler, at DEVSHELL_LOG_FILE_LEVEL if set.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LOG_LEVEL = "DEVSHELL_LOG_LEVEL"
ENV_LOG_FILE = "DEVSHELL_LOG_FILE"
ENV_LOG_FILE_LEVEL = "DEVSHELL_LOG_FILE_LEVEL"

# Console formats, from the most to the least verbose level they serve.
_CONSOLE_FORMATS: list[tuple[int, str, str | None]] = [
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "devshell: %(message)s", None),
]

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown or empty means WARNING."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Console level name from the CLI flags, falling back to the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LOG_LEVEL, "WARNING")


def _console_formatter(level: int) -> logging.Formatter:
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter(_CONSOLE_FORMATS[-1][1])


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Install the console handler (and optional file handler) on the root logger.

    Args:
        level: Console level name.
        log_file: Path of a log file to append to.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else console_level
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
