"""Closed-form size of the search space explored by the engine.

For ``n`` usable tokens the engine visits every ordered arrangement of 1..n
distinct positions, so the worst case is the sum of P(n, k) over k. The
figures here feed the pre-flight warning only; the engine never uses them
to limit work.
"""

from __future__ import annotations

from typing import Any

from permsift.models import InvalidArgumentError


def _require_int(value: Any, *, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{label} must be an integer, got {value!r}")
    return value


def permutations_for_slots(n: int, slots: int) -> int:
    """Return P(n, slots) = n * (n - 1) * ... * (n - slots + 1)."""
    n = _require_int(n, label="number of items")
    slots = _require_int(slots, label="slots")
    if n <= 0:
        raise InvalidArgumentError("number of items must be a positive integer")
    if slots <= 0:
        raise InvalidArgumentError("slots must be a positive integer")
    if slots > n:
        raise InvalidArgumentError(
            f"slots ({slots}) may not be larger than the number of items ({n})"
        )

    total = 1
    for offset in range(slots):
        total *= n - offset
    return total


def permutation_terms(n: int) -> list[int]:
    """Return ``[P(n, 1), ..., P(n, n)]``."""
    n = _require_int(n, label="number of items")
    if n <= 0:
        raise InvalidArgumentError("number of items must be a positive integer")
    terms: list[int] = []
    running = 1
    for slots in range(1, n + 1):
        # P(n, k) = P(n, k - 1) * (n - k + 1)
        running *= n - slots + 1
        terms.append(running)
    return terms


def estimate_count(n: int) -> int:
    """Return the number of candidates the engine would check for ``n`` tokens.

    Raises :class:`InvalidArgumentError` when ``n`` is not a positive integer.
    """
    return sum(permutation_terms(n))
