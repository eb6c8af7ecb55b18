"""Sinks for the one-line diagnostics emitted during a search."""

from __future__ import annotations

import logging
from typing import Callable, Iterator

from permsift._logging import get_logger

DiagnosticsSink = Callable[[str], None]

_log = get_logger("diagnostics")


def logging_sink(
    logger: logging.Logger | None = None, *, level: int = logging.WARNING
) -> DiagnosticsSink:
    target = logger if logger is not None else _log

    def _emit(line: str) -> None:
        target.log(level, "%s", line)

    return _emit


class CollectingSink:
    """Keeps every line it receives, in order."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def __call__(self, line: str) -> None:
        self.lines.append(line)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def matching(self, event: str) -> list[str]:
        return [line for line in self.lines if line.startswith(f"{event} ")]
