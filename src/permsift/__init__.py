"""permsift: filtered search over ordered token arrangements."""

from permsift.engine import generate_filtered, iter_candidates, iter_matches, search
from permsift.estimator import estimate_count, permutations_for_slots
from permsift.models import (
    ConfigError,
    InvalidArgumentError,
    PermsiftError,
    SearchResult,
    SearchStats,
    Thresholds,
)
from permsift.predicates import accept_all, get_predicate, is_palindrome

__all__ = [
    "ConfigError",
    "InvalidArgumentError",
    "PermsiftError",
    "SearchResult",
    "SearchStats",
    "Thresholds",
    "accept_all",
    "estimate_count",
    "generate_filtered",
    "get_predicate",
    "is_palindrome",
    "iter_candidates",
    "iter_matches",
    "permutations_for_slots",
    "search",
]
