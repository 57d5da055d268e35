"""Per-category scoring and aggregation into a single rank."""

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import CategoryMismatchError
from .matching import Matcher, default_matcher
from .models import RankedEntry, SearchableRecord


def score_map(x: float) -> float:
    """Map a raw score from (-inf, inf) into (0, 1); score_map(0) == 0.5."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    # Same logistic curve, arranged so exp() cannot overflow for large -x
    z = math.exp(x)
    return z / (1.0 + z)


def _check_queries(record: SearchableRecord, queries: Sequence[str]) -> None:
    if len(queries) != len(record.categories):
        raise CategoryMismatchError("query texts", len(record.categories), len(queries))


def rank(
    record: SearchableRecord,
    queries: Sequence[str],
    matcher: Matcher = default_matcher,
) -> Optional[float]:
    """
    Rank a record against one query text per category.

    Returns the sum of the normalized per-category scores, or None if any
    category fails to match.
    """
    _check_queries(record, queries)
    total = 0.0
    for needle, haystack in zip(queries, record.categories):
        raw = matcher(needle, haystack)
        if raw is None:
            return None
        total += score_map(raw)
    return total


def rank_weighted(
    record: SearchableRecord,
    queries: Sequence[str],
    weights: Sequence[float],
    matcher: Matcher = default_matcher,
) -> Optional[float]:
    """Like rank(), with each category's normalized score multiplied by its weight."""
    _check_queries(record, queries)
    if len(weights) != len(record.categories):
        raise CategoryMismatchError("weights", len(record.categories), len(weights))

    total = 0.0
    for needle, haystack, weight in zip(queries, record.categories, weights):
        raw = matcher(needle, haystack)
        if raw is None:
            return None
        total += score_map(raw) * weight
    return total


def sort_key(entry: RankedEntry) -> Tuple[float, int]:
    """Best score first, ties broken by record id ascending."""
    return (-entry.score, entry.record.id)


def scan(
    records: Iterable[SearchableRecord],
    queries: Sequence[str],
    matcher: Matcher = default_matcher,
    weights: Optional[Sequence[float]] = None,
) -> Tuple[RankedEntry, ...]:
    """Score every record, drop non-matches and return them best first."""
    entries: List[RankedEntry] = []
    for record in records:
        if weights is None:
            score = rank(record, queries, matcher)
        else:
            score = rank_weighted(record, queries, weights, matcher)
        if score is not None:
            entries.append(RankedEntry(record=record, score=score))
    entries.sort(key=sort_key)
    return tuple(entries)
