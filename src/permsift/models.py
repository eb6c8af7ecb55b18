from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class PermsiftError(RuntimeError):
    """Base error for permsift failures."""


class ConfigError(PermsiftError):
    """Raised when settings, predicate names or CLI values are invalid."""


class InvalidArgumentError(PermsiftError, ValueError):
    """Raised when an estimator argument violates its preconditions."""


DEFAULT_INPUT_SIZE_WARNING = 10
DEFAULT_RESULT_COUNT_WARNING = 10_000
DEFAULT_ELAPSED_MS_WARNING = 100


@dataclass(frozen=True)
class Thresholds:
    # Warn-only limits; none of them stops a search.
    input_size: int = DEFAULT_INPUT_SIZE_WARNING
    result_count: int = DEFAULT_RESULT_COUNT_WARNING
    elapsed_ms: int = DEFAULT_ELAPSED_MS_WARNING

    def to_json(self) -> dict[str, Any]:
        return {
            "input_size": self.input_size,
            "result_count": self.result_count,
            "elapsed_ms": self.elapsed_ms,
        }


@dataclass
class SearchStats:
    """Per-call counters for one search.

    ``items_checked`` counts candidates handed to the predicate. It matches
    the estimator's count unless the input holds null or empty tokens.
    """

    items_checked: int = 0
    matches: int = 0
    result_warning_emitted: bool = False
    elapsed_ms: float = 0.0

    def reset(self) -> None:
        self.items_checked = 0
        self.matches = 0
        self.result_warning_emitted = False
        self.elapsed_ms = 0.0

    def to_json(self) -> dict[str, Any]:
        return {
            "items_checked": self.items_checked,
            "matches": self.matches,
            "result_warning_emitted": self.result_warning_emitted,
            "elapsed_ms": round(self.elapsed_ms, 3),
        }


@dataclass(frozen=True)
class SearchResult:
    matches: frozenset[str]
    stats: SearchStats
    token_count: int
    estimated_count: int | None = None

    def to_json(self) -> dict[str, Any]:
        return {
            "matches": sorted(self.matches),
            "token_count": self.token_count,
            "estimated_count": self.estimated_count,
            "stats": self.stats.to_json(),
        }
