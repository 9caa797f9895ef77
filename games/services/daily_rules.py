"""Rules for the player-of-the-day game: reveal, budget and correctness."""

from typing import NamedTuple

from config import Config
from models import Feedback, SquadPlayer
from utils.normalization import normalize_name
from utils.similarity import fuzzy_score, similarity

BLUR_STEP_PERCENT = 10


class GuessEvaluation(NamedTuple):
    normalized: str
    correct: bool
    # Accepted through the fuzzy threshold rather than an exact name
    close: bool


def blur_percent(wrong_attempts: int) -> int:
    """How blurred the photo is: 100 at the start, 10 points clearer per miss."""
    return max(0, 100 - wrong_attempts * BLUR_STEP_PERCENT)


def attempts_left(wrong_attempts: int) -> int:
    return max(0, Config.MAX_WRONG_ATTEMPTS - wrong_attempts)


def is_lost(wrong_attempts: int) -> bool:
    return wrong_attempts >= Config.MAX_WRONG_ATTEMPTS


def evaluate_guess(guess_text: str, player: SquadPlayer) -> GuessEvaluation:
    """Check a guess against every accepted name of the player.

    Exact normalized matches are tried against all variants before any
    fuzzy comparison. An empty guess is never correct.
    """
    guess = normalize_name(guess_text)
    if not guess:
        return GuessEvaluation(guess, False, False)

    variants = [normalize_name(name) for name in player.name_variants]

    if guess in variants:
        return GuessEvaluation(guess, True, False)

    for variant in variants:
        _, accepted = fuzzy_score(guess, variant)
        if accepted:
            return GuessEvaluation(guess, True, True)

    return GuessEvaluation(guess, False, False)


def miss_feedback(normalized_guess: str, player: SquadPlayer) -> Feedback:
    """Cosmetic hint for a wrong guess: 'close' if it resembles the name."""
    score = similarity(normalized_guess, normalize_name(player.primary_name))
    return "close" if score >= Config.CLOSE_FEEDBACK_SIMILARITY else "wrong"
