"""String similarity measures for suggesting training corrections.

Distances (Hamming, Levenshtein, Damerau-Levenshtein) are lower-is-closer;
Jaro-Winkler and Dice are similarities in [0, 1], higher-is-closer.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Tuple

from nltk.metrics.distance import edit_distance, jaro_winkler_similarity
from nltk.util import ngrams


def hamming(a: str, b: str) -> int:
    """Number of differing positions; -1 when the lengths differ."""
    if len(a) != len(b):
        return -1
    return sum(1 for x, y in zip(a, b) if x != y)


def jaro_winkler(a: str, b: str) -> float:
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    return jaro_winkler_similarity(a, b)


def levenshtein(a: str, b: str) -> int:
    return edit_distance(a, b)


def damerau_levenshtein(a: str, b: str) -> int:
    return edit_distance(a, b, transpositions=True)


def dice_coefficient(a: str, b: str) -> float:
    """Sorensen-Dice coefficient over character bigrams."""
    bigrams_a = list(ngrams(a, 2))
    bigrams_b = list(ngrams(b, 2))
    if not bigrams_a and not bigrams_b:
        return 1.0 if a == b else 0.0
    remaining = list(bigrams_b)
    overlap = 0
    for bigram in bigrams_a:
        if bigram in remaining:
            remaining.remove(bigram)
            overlap += 1
    return 2.0 * overlap / (len(bigrams_a) + len(bigrams_b))


def string_distances(subject: str, test: str) -> Dict[str, float]:
    """All measures between ``subject`` and ``test``."""
    return {
        "hamming": hamming(subject, test),
        "jWinkler": jaro_winkler(subject, test),
        "levenshtein": levenshtein(subject, test),
        "damerauLevenshtein": damerau_levenshtein(subject, test),
        "diceCoefficient": dice_coefficient(subject, test),
    }


# metric name -> (function, higher_is_closer)
METRICS: Dict[str, Tuple[Callable[[str, str], float], bool]] = {
    "levenshtein": (levenshtein, False),
    "damerau_levenshtein": (damerau_levenshtein, False),
    "jaro_winkler": (jaro_winkler, True),
    "dice": (dice_coefficient, True),
}


def closest_strings(
    subject: str,
    candidates: Iterable[str],
    limit: int = 5,
    metric: str = "levenshtein",
) -> List[Tuple[str, float]]:
    """Rank ``candidates`` by closeness to ``subject``, best first.

    Ties keep the candidates' original order.
    """
    try:
        func, higher_is_closer = METRICS[metric]
    except KeyError:
        raise ValueError(f"Unknown metric {metric!r}. Available: {sorted(METRICS)}") from None
    scored = [(candidate, func(subject, candidate)) for candidate in candidates]
    scored.sort(key=lambda item: item[1], reverse=higher_is_closer)
    return scored[:limit]
