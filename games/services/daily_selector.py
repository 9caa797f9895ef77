"""Deterministic choice of the player of the day.

The choice is a pure function of the date key, the scope key and the
(stably ordered) candidate pool, so every process agrees on today's
player without coordinating. Storing it is only a cache.
"""

import hashlib
from collections.abc import Sequence
from typing import Any

from games.errors import NoCandidates


def daily_seed(date_key: str, scope_key: str) -> int:
    """First 32 bits (big-endian) of SHA-256("<date_key>:<scope_key>")."""
    digest = hashlib.sha256(f"{date_key}:{scope_key}".encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big")


def select_daily(date_key: str, scope_key: str, candidate_pool: Sequence[Any]) -> int:
    """Index into the pool of the day's pick.

    Raises NoCandidates if the pool is empty.
    """
    if not candidate_pool:
        raise NoCandidates(f"No candidates for {scope_key} on {date_key}")
    return daily_seed(date_key, scope_key) % len(candidate_pool)
