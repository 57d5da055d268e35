"""
Fuzzy match primitive used by the scorer.

A matcher is any callable `(query, candidate) -> Optional[float]`. It returns
None when the candidate does not match and otherwise a raw score where larger
means a better alignment. The scorer normalizes raw scores, so their range is
up to the matcher.
"""

from typing import Callable, Optional

from rapidfuzz import fuzz
from rapidfuzz.distance import LCSseq

Matcher = Callable[[str, str], Optional[float]]

# partial_ratio is 0..100; shift and scale so 50 maps to a neutral 0.0
_RATIO_CENTER = 50.0
_RATIO_SCALE = 10.0


def is_subsequence(needle: str, haystack: str) -> bool:
    """True when every character of needle appears in haystack, in order."""
    if len(needle) > len(haystack):
        return False
    return LCSseq.similarity(needle, haystack) == len(needle)


def subsequence_match(query: str, candidate: str) -> Optional[float]:
    """
    Case-insensitive subsequence match scored with rapidfuzz.

    The query must be a subsequence of the candidate to match at all; matches
    are then scored by how well the query aligns with the best window of the
    candidate. An empty query matches everything with a neutral score.
    """
    needle = query.lower()
    if not needle:
        return 0.0

    haystack = candidate.lower()
    if not is_subsequence(needle, haystack):
        return None

    ratio = fuzz.partial_ratio(needle, haystack)
    return (ratio - _RATIO_CENTER) / _RATIO_SCALE


default_matcher: Matcher = subsequence_match
