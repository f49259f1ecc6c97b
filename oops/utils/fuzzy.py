"""
Oops Utils - Fuzzy string matching.

Thin layer over difflib's SequenceMatcher ratio with deterministic
ordering: candidates are ranked by descending similarity and equal
scores keep the order of the candidate pool.
"""

from __future__ import annotations

from collections.abc import Iterable
from difflib import SequenceMatcher

from oops.config.constants import DEFAULT_CUTOFF, DEFAULT_NUM_CLOSE_MATCHES


def similarity(a: str, b: str) -> float:
    """Normalized similarity in [0, 1], 1.0 for identical strings."""
    return SequenceMatcher(None, a, b).ratio()


def get_close_matches(
    word: str,
    possibilities: Iterable[str],
    n: int = DEFAULT_NUM_CLOSE_MATCHES,
    cutoff: float = DEFAULT_CUTOFF,
) -> list[str]:
    """
    Return up to n candidates at least cutoff-similar to word.

    Unlike difflib.get_close_matches, duplicates in the pool are ignored
    and ties are broken by pool order, so the result is stable.

    Args:
        word: The mistyped token.
        possibilities: Candidate pool, in preference order.
        n: Maximum number of results.
        cutoff: Minimum similarity in [0, 1].

    Returns:
        Matching candidates, best first. Empty if none clears the cutoff.
    """
    if n <= 0:
        return []
    if not 0.0 <= cutoff <= 1.0:
        raise ValueError(f"cutoff must be in [0, 1], got {cutoff!r}")

    matcher = SequenceMatcher()
    matcher.set_seq2(word)
    seen: set[str] = set()
    scored: list[tuple[float, str]] = []

    for candidate in possibilities:
        if candidate in seen:
            continue
        seen.add(candidate)
        matcher.set_seq1(candidate)
        # Cheap upper bounds first, like difflib does
        if (
            matcher.real_quick_ratio() >= cutoff
            and matcher.quick_ratio() >= cutoff
        ):
            score = matcher.ratio()
            if score >= cutoff:
                scored.append((score, candidate))

    # sorted() is stable: equal scores stay in pool order
    scored = sorted(scored, key=lambda item: item[0], reverse=True)
    return [candidate for _, candidate in scored[:n]]


def get_closest(
    word: str,
    possibilities: Iterable[str],
    cutoff: float = DEFAULT_CUTOFF,
    fallback_to_first: bool = True,
) -> str | None:
    """
    Return the best match for word.

    Args:
        word: The mistyped token.
        possibilities: Candidate pool.
        cutoff: Minimum similarity.
        fallback_to_first: Return the first candidate when nothing matches.
    """
    pool = list(possibilities)
    if not pool:
        return None
    matches = get_close_matches(word, pool, n=1, cutoff=cutoff)
    if matches:
        return matches[0]
    return pool[0] if fallback_to_first else None
