"""Generate-and-filter search over ordered token arrangements.

Every candidate is the concatenation of one or more distinct token positions
in a chosen order. Candidates of every length are tested, not only full
permutations, and nothing is materialized beyond the matches themselves:
candidates are produced depth-first by a generator and dropped as soon as
the predicate has seen them.

Remaining positions are tracked as a bitmask over the input token array.
Positions holding ``None`` or ``""`` are left out of the starting mask, so
they never produce a candidate or open a branch.
"""

from __future__ import annotations

import time
from typing import Iterable, Iterator, Sequence, cast

from permsift._logging import get_logger
from permsift.diagnostics import DiagnosticsSink, logging_sink
from permsift.estimator import estimate_count
from permsift.models import SearchResult, SearchStats, Thresholds
from permsift.predicates import Predicate

_log = get_logger("engine")


def _as_token_list(tokens: Iterable[str | None] | None) -> list[str | None]:
    if tokens is None:
        return []
    return list(tokens)


def _usable_mask(tokens: Sequence[str | None]) -> int:
    mask = 0
    for index, token in enumerate(tokens):
        if token:
            mask |= 1 << index
    return mask


def _walk(
    tokens: Sequence[str | None],
    prefix: str,
    remaining: int,
    stats: SearchStats,
) -> Iterator[str]:
    pending = remaining
    while pending:
        # Lowest set bit first keeps positions in input order.
        bit = pending & -pending
        pending ^= bit
        candidate = prefix + cast(str, tokens[bit.bit_length() - 1])
        stats.items_checked += 1
        yield candidate
        rest = remaining ^ bit
        if rest:
            yield from _walk(tokens, candidate, rest, stats)


def iter_candidates(
    tokens: Iterable[str | None] | None,
    stats: SearchStats | None = None,
    *,
    prefix: str | None = None,
) -> Iterator[str]:
    """Yield every candidate depth-first, one per arrangement of positions.

    Equal token values at different positions are explored independently,
    so the same string can be yielded more than once. ``stats.items_checked``
    is incremented for each yielded candidate.
    """
    token_list = _as_token_list(tokens)
    stats = stats if stats is not None else SearchStats()
    mask = _usable_mask(token_list)
    if not mask:
        return iter(())
    return _walk(token_list, prefix or "", mask, stats)


def iter_matches(
    tokens: Iterable[str | None] | None,
    predicate: Predicate,
    stats: SearchStats | None = None,
) -> Iterator[str]:
    """Yield each distinct candidate accepted by *predicate* as soon as it is found.

    Exceptions raised by *predicate* propagate to the caller unchanged.
    """
    stats = stats if stats is not None else SearchStats()
    seen: set[str] = set()
    for candidate in iter_candidates(tokens, stats):
        if not predicate(candidate) or candidate in seen:
            continue
        seen.add(candidate)
        stats.matches = len(seen)
        yield candidate


def generate_filtered(
    tokens: Iterable[str | None] | None,
    predicate: Predicate,
    *,
    thresholds: Thresholds | None = None,
    sink: DiagnosticsSink | None = None,
    stats: SearchStats | None = None,
) -> set[str]:
    """Return the set of candidates built from *tokens* that satisfy *predicate*.

    A ``None`` or empty token list gives an empty set. Diagnostics go to
    *sink* (the ``permsift.diagnostics`` logger by default):

    * a pre-flight line with the theoretical candidate count when the input
      has more than ``thresholds.input_size`` tokens, and a matching line
      with the actual count once the search finishes;
    * one line the first time the result set grows past
      ``thresholds.result_count``;
    * a latency line when the search takes longer than
      ``thresholds.elapsed_ms`` milliseconds.

    None of these stop the search. Pass *stats* to read the counters back;
    it is reset at the start of every call.
    """
    thresholds = thresholds if thresholds is not None else Thresholds()
    emit = sink if sink is not None else logging_sink()
    stats = stats if stats is not None else SearchStats()
    stats.reset()

    token_list = _as_token_list(tokens)
    if not token_list:
        return set()

    token_count = len(token_list)
    excessive = token_count > thresholds.input_size
    estimated: int | None = None
    if excessive:
        estimated = estimate_count(token_count)
        emit(
            f"search_preflight tokens={token_count} "
            f"potential_permutations={estimated} "
            f"threshold={thresholds.input_size} slow performance is likely"
        )

    _log.debug(
        "search_start tokens=%d usable=%d",
        token_count,
        sum(1 for token in token_list if token),
    )
    started = time.perf_counter()
    matches: set[str] = set()
    for candidate in iter_candidates(token_list, stats):
        if not predicate(candidate) or candidate in matches:
            continue
        matches.add(candidate)
        if not stats.result_warning_emitted and len(matches) > thresholds.result_count:
            stats.result_warning_emitted = True
            emit(
                f"search_result_growth matches={len(matches)} "
                f"threshold={thresholds.result_count} "
                "potential memory problems; generation continues"
            )
    stats.matches = len(matches)
    stats.elapsed_ms = (time.perf_counter() - started) * 1000.0

    if stats.elapsed_ms > thresholds.elapsed_ms:
        emit(
            f"search_slow elapsed_ms={stats.elapsed_ms:.1f} "
            f"tokens={token_count} matches={len(matches)} "
            f"threshold_ms={thresholds.elapsed_ms}"
        )
    if excessive:
        # Diverges from the estimate only when null or empty tokens were skipped.
        emit(
            f"search_checked tokens={token_count} "
            f"items_checked={stats.items_checked} "
            f"potential_permutations={estimated}"
        )
    _log.debug(
        "search_end tokens=%d items_checked=%d matches=%d elapsed_ms=%.3f",
        token_count,
        stats.items_checked,
        len(matches),
        stats.elapsed_ms,
    )
    return matches


def search(
    tokens: Iterable[str | None] | None,
    predicate: Predicate,
    *,
    thresholds: Thresholds | None = None,
    sink: DiagnosticsSink | None = None,
) -> SearchResult:
    """Run :func:`generate_filtered` and return its matches with fresh counters."""
    token_list = _as_token_list(tokens)
    stats = SearchStats()
    matches = generate_filtered(
        token_list,
        predicate,
        thresholds=thresholds,
        sink=sink,
        stats=stats,
    )
    return SearchResult(
        matches=frozenset(matches),
        stats=stats,
        token_count=len(token_list),
        estimated_count=estimate_count(len(token_list)) if token_list else None,
    )
