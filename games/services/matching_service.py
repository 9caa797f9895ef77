"""Matching free-text guesses against a pool of reference entries."""

import logging
from collections.abc import Collection, Sequence

from models import Matched, MatchResult, NoMatch, ReferenceEntry
from utils.normalization import normalize_name
from utils.similarity import fuzzy_score

logger = logging.getLogger(__name__)


def _normalized_aliases(entry: ReferenceEntry) -> list[str]:
    return [normalize_name(alias) for alias in entry.aliases]


def _matched(entry: ReferenceEntry, score: float) -> Matched:
    return Matched(
        entry_id=entry.id,
        display_name=entry.display_name,
        jersey_number=entry.jersey_number,
        score=score,
    )


def is_already_guessed(guess: str, entry: ReferenceEntry) -> bool:
    """Check whether a normalized guess names an entry that is already solved."""
    if guess == entry.normalized_name:
        return True
    _, accepted = fuzzy_score(guess, entry.normalized_name)
    if accepted:
        return True
    return guess in _normalized_aliases(entry)


def match_guess(
    guess_text: str,
    candidates: Sequence[ReferenceEntry],
    already_matched_ids: Collection[int],
) -> MatchResult:
    """Decide which entry, if any, a guess identifies.

    Tiers are tried in order and the first hit wins:

    1. already solved: the guess names (exactly, fuzzily or by alias) an
       entry in `already_matched_ids`
    2. exact normalized name
    3. exact normalized alias
    4. substring either way, if the similarity clears the threshold
    5. best fuzzy similarity that clears that entry's threshold

    Within a tier, candidates are scanned in the given order and the first
    one found wins; in the fuzzy tier a later candidate only replaces the
    best so far with a strictly higher score.

    Pure: recording the match is up to the caller.
    """
    guess = normalize_name(guess_text)
    if not guess:
        return NoMatch(reason="no_match")

    solved = set(already_matched_ids)
    open_candidates = [entry for entry in candidates if entry.id not in solved]

    for entry in candidates:
        if entry.id in solved and is_already_guessed(guess, entry):
            return NoMatch(reason="already_guessed")

    for entry in open_candidates:
        if entry.normalized_name == guess:
            return _matched(entry, 1.0)

    for entry in open_candidates:
        if guess in _normalized_aliases(entry):
            return _matched(entry, 1.0)

    for entry in open_candidates:
        name = entry.normalized_name
        if guess in name or name in guess:
            score, accepted = fuzzy_score(guess, name)
            if accepted:
                return _matched(entry, score)

    best: tuple[ReferenceEntry, float] | None = None
    for entry in open_candidates:
        score, accepted = fuzzy_score(guess, entry.normalized_name)
        if accepted and (best is None or score > best[1]):
            best = (entry, score)

    if best is not None:
        entry, score = best
        logger.debug(f"Fuzzy match '{guess}' -> '{entry.normalized_name}' ({score:.3f})")
        return _matched(entry, score)

    return NoMatch(reason="no_match")
