"""Logging setup for permsift.

Two kinds of records flow through the ``permsift`` logger tree: lifecycle
lines from the CLI (``cli_command_start`` ...) and the search diagnostics
sent to ``permsift.diagnostics`` (``search_preflight``, ``search_slow`` ...).
Diagnostics are warnings about combinatorial cost, so they always reach the
console even when ``PERMSIFT_LOG_LEVEL`` asks for ERROR only.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

ROOT_LOGGER = "permsift"
DIAGNOSTICS_LOGGER = f"{ROOT_LOGGER}.diagnostics"

_HANDLER_ATTR = "_permsift_handler_id"
_STREAM_HANDLER_ID = "permsift_stream"
_FILE_HANDLER_ID = "permsift_file"
_FORMAT = "ts=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"


class _StreamLevelFilter(logging.Filter):
    """Pass records at or above *level*, plus every search diagnostic."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= self.level:
            return True
        return record.name == DIAGNOSTICS_LOGGER and record.levelno >= logging.WARNING


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``permsift`` namespace."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def _level_from_env() -> int:
    raw = os.environ.get("PERMSIFT_LOG_LEVEL", "").strip().upper()
    resolved = getattr(logging, raw, None) if raw else None
    return resolved if isinstance(resolved, int) else logging.WARNING


def _find_handler(root: logging.Logger, handler_id: str) -> logging.Handler | None:
    for handler in root.handlers:
        if getattr(handler, _HANDLER_ATTR, None) == handler_id:
            return handler
    return None


def _attach(root: logging.Logger, handler: logging.Handler, handler_id: str) -> None:
    setattr(handler, _HANDLER_ATTR, handler_id)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)


def _detach(root: logging.Logger, handler: logging.Handler | None) -> None:
    if handler is not None:
        root.removeHandler(handler)
        handler.close()


def _configure_stream(root: logging.Logger, level: int) -> None:
    handler = _find_handler(root, _STREAM_HANDLER_ID)
    if handler is None:
        handler = logging.StreamHandler()
        _attach(root, handler, _STREAM_HANDLER_ID)
    for old in list(handler.filters):
        if isinstance(old, _StreamLevelFilter):
            handler.removeFilter(old)
    handler.addFilter(_StreamLevelFilter(level))
    # Level gating happens in the filter so diagnostics can bypass it.
    handler.setLevel(logging.NOTSET)


def _configure_file(root: logging.Logger, level: int) -> int | None:
    handler = _find_handler(root, _FILE_HANDLER_ID)
    raw_path = os.environ.get("PERMSIFT_LOG_FILE", "").strip()
    if not raw_path:
        _detach(root, handler)
        return None

    path = Path(raw_path).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    current = (
        Path(handler.baseFilename).resolve()
        if isinstance(handler, logging.FileHandler)
        else None
    )
    if current != path:
        _detach(root, handler)
        handler = logging.FileHandler(path, encoding="utf-8")
        _attach(root, handler, _FILE_HANDLER_ID)
    file_level = min(level, logging.INFO)
    handler.setLevel(file_level)
    return file_level


def setup_logging(*, level: int | None = None) -> None:
    """Configure the ``permsift`` logger tree for console (and optional file) output.

    *level* overrides ``PERMSIFT_LOG_LEVEL`` (default WARNING). When
    ``PERMSIFT_LOG_FILE`` is set, a file handler records at least INFO so
    CLI lifecycle lines are kept. Safe to call repeatedly.
    """
    stream_level = level if level is not None else _level_from_env()
    root = logging.getLogger(ROOT_LOGGER)
    _configure_stream(root, stream_level)
    file_level = _configure_file(root, stream_level)

    effective = min(stream_level, logging.WARNING)
    if file_level is not None:
        effective = min(effective, file_level)
    root.setLevel(effective)
