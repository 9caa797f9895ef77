"""Name normalization for comparing player-name guesses.

Every comparison in the guessing games runs on normalized text: accents
stripped, lowercased, a fixed set of punctuation removed and whitespace
collapsed. "Júlio César", "julio  cesar" and "JULIO CESAR." all normalize
to "julio cesar".
"""

import re
import unicodedata

# Periods, commas, hyphens and apostrophes
PUNCTUATION_PATTERN = re.compile(r"[.,\-']")
WHITESPACE_PATTERN = re.compile(r"\s+")


def strip_diacritics(text: str) -> str:
    """Decompose to NFD and drop the combining marks."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def normalize_name(text: str | None) -> str:
    """Canonicalize a name or guess. Never fails; junk input yields ''."""
    if not text:
        return ""
    # Lowercase first: some uppercase letters lowercase into a base letter
    # plus a combining mark ("İ"), which must be stripped too.
    normalized = strip_diacritics(text.lower())
    normalized = PUNCTUATION_PATTERN.sub("", normalized)
    normalized = WHITESPACE_PATTERN.sub(" ", normalized)
    return normalized.strip()
