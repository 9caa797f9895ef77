"""Edit-distance similarity between normalized names."""

from rapidfuzz.distance import Levenshtein


def similarity(a: str, b: str) -> float:
    """Return 1 - levenshtein(a, b) / max(len(a), len(b)), in [0, 1].

    Identical strings score 1.0; an empty string against a non-empty one
    scores 0.0.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    distance = Levenshtein.distance(a, b)
    return 1 - distance / max(len(a), len(b))


def acceptance_threshold(length: int) -> float:
    """Minimum similarity for a fuzzy match at the given length.

    A single typo costs a short name proportionally more, so short names
    need a higher score.
    """
    if length <= 6:
        return 0.85
    elif length <= 12:
        return 0.80
    else:
        return 0.75


def fuzzy_score(guess: str, name: str) -> tuple[float, bool]:
    """Score a normalized guess against a normalized name.

    Returns (similarity, accepted). The threshold comes from the shorter of
    the two strings, so a short guess against a long name is held to the
    stricter bound.
    """
    score = similarity(guess, name)
    threshold = acceptance_threshold(min(len(guess), len(name)))
    return score, score >= threshold
