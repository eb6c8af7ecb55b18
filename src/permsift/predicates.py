"""Boolean tests applied to each candidate.

The engine accepts any ``Callable[[str], bool]``; the registry below only
exists so the CLI and settings files can refer to predicates by name.
"""

from __future__ import annotations

import re
from typing import Callable, Mapping

from permsift.models import ConfigError

Predicate = Callable[[str], bool]

# Latin letters only: accented and non-Latin letters are dropped like
# punctuation.
_NON_LETTER_RE = re.compile(r"[^A-Za-z]")


def normalize_letters(candidate: str | None) -> str:
    if not candidate:
        return ""
    return _NON_LETTER_RE.sub("", candidate).lower()


def is_palindrome(candidate: str | None) -> bool:
    """Return True when the letters of *candidate* read the same both ways.

    Checks are case-insensitive and ignore everything except A-Z/a-z, so
    ``"Madam, I'm Adam"`` and ``"ab123ba"`` qualify. A value with no letters
    (``None``, ``""``, ``"123"``) is not a palindrome.
    """
    letters = normalize_letters(candidate)
    if not letters:
        return False
    return letters == letters[::-1]


def accept_all(candidate: str | None) -> bool:
    """Accept every candidate; useful for checking counts against the estimate."""
    return True


PREDICATES: Mapping[str, Predicate] = {
    "palindrome": is_palindrome,
    "all": accept_all,
}


def available_predicates() -> list[str]:
    return sorted(PREDICATES)


def get_predicate(name: str) -> Predicate:
    key = name.strip() if isinstance(name, str) else ""
    predicate = PREDICATES.get(key)
    if predicate is None:
        available = ", ".join(available_predicates())
        raise ConfigError(f"Unknown predicate '{name}'. Available: {available}")
    return predicate
