"""Service for the roster-guessing game ("Adivinhe o Elenco")."""

import asyncio
import logging
import weakref
from typing import Optional

from db.database import Database
from games.errors import NotFound, NotInProgress
from games.services.matching_service import match_guess
from models import (
    AttemptStart,
    AttemptStatus,
    AttemptView,
    Matched,
    NoMatch,
    ReferenceSetDetail,
    ReferenceSetSummary,
    RosterGuessOutcome,
)
from utils.dates import Clock, utc_now

logger = logging.getLogger(__name__)


class RosterGameService:
    """Service for managing roster-guessing attempts.

    Attempt lifecycle:

        in_progress --guess(last entry)--> completed
        in_progress --abandon()--> abandoned
        any --reset()--> in_progress (guesses and wrong count cleared)

    Starting a set that already has a completed or abandoned attempt
    restarts that same attempt.
    """

    def __init__(self, db: Database, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self._attempt_locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, attempt_id: int) -> asyncio.Lock:
        lock = self._attempt_locks.get(attempt_id)
        if lock is None:
            lock = asyncio.Lock()
            self._attempt_locks[attempt_id] = lock
        return lock

    async def list_sets(self) -> list[ReferenceSetSummary]:
        return await self.db.list_reference_sets()

    async def get_set(self, slug: str) -> Optional[ReferenceSetDetail]:
        reference_set = await self.db.get_reference_set_by_slug(slug)
        if not reference_set:
            return None
        entries = await self.db.get_reference_entries(reference_set.id)
        return ReferenceSetDetail(reference_set=reference_set, entries=entries)

    async def start(self, user_id: str, set_id: int) -> AttemptStart:
        """Start playing a set, or pick up where the user left off.

        Returns the in-progress attempt and the entries already solved in it.
        Raises NotFound if the set doesn't exist.
        """
        reference_set = await self.db.get_reference_set(set_id)
        if not reference_set:
            raise NotFound(f"Reference set {set_id} not found")

        attempt = await self.db.get_attempt_for_set(user_id, set_id)
        if attempt is None:
            attempt_id = await self.db.create_attempt(user_id, set_id)
            if attempt_id is not None:
                logger.info(f"Created attempt {attempt_id} for user {user_id} on set {reference_set.slug}")
                return AttemptStart(attempt_id=attempt_id)
            # Another request created it first
            logger.info(f"Attempt for user {user_id} on set {set_id} already created, re-reading")
            attempt = await self.db.get_attempt_for_set(user_id, set_id)

        async with self._lock_for(attempt.id):
            attempt = await self.db.get_attempt(attempt.id, user_id)
            if attempt.status == "in_progress":
                solved = await self.db.get_solved_entry_ids(attempt.id)
                return AttemptStart(attempt_id=attempt.id, solved_entry_ids=solved)

            await self.db.restart_attempt(attempt.id, self.clock())
            logger.info(f"Restarted {attempt.status} attempt {attempt.id} for user {user_id}")
            return AttemptStart(attempt_id=attempt.id)

    async def start_by_slug(self, user_id: str, slug: str) -> AttemptStart:
        reference_set = await self.db.get_reference_set_by_slug(slug)
        if not reference_set:
            raise NotFound(f"Reference set '{slug}' not found")
        return await self.start(user_id, reference_set.id)

    async def get_attempt(self, attempt_id: int, user_id: str) -> Optional[AttemptView]:
        """Get an attempt's board, or None if the user has no such attempt."""
        attempt = await self.db.get_attempt(attempt_id, user_id)
        if not attempt:
            return None
        reference_set = await self.db.get_reference_set(attempt.set_id)
        if not reference_set:
            return None

        return AttemptView(
            id=attempt.id,
            status=attempt.status,
            wrong_guesses=attempt.wrong_guesses,
            solved_entry_ids=await self.db.get_solved_entry_ids(attempt.id),
            reference_set=reference_set,
            entries=await self.db.get_reference_entries(reference_set.id),
        )

    async def guess(self, attempt_id: int, user_id: str, text: str) -> RosterGuessOutcome:
        """Submit a name for an attempt.

        Raises NotFound if the user has no such attempt and NotInProgress if
        it is completed or abandoned.
        """
        async with self._lock_for(attempt_id):
            attempt = await self.db.get_attempt(attempt_id, user_id)
            if not attempt:
                raise NotFound(f"Attempt {attempt_id} not found")
            if attempt.status != "in_progress":
                raise NotInProgress(attempt_id, attempt.status)

            entries = await self.db.get_reference_entries(attempt.set_id)
            solved = await self.db.get_solved_entry_ids(attempt_id)
            result = match_guess(text, entries, solved)
            status: AttemptStatus = "in_progress"
            now = self.clock()

            if isinstance(result, Matched):
                recorded = await self.db.add_attempt_guess(attempt_id, result.entry_id, text, result.score)
                if not recorded:
                    # Solved by a concurrent writer between our read and insert
                    return RosterGuessOutcome(result=NoMatch(reason="already_guessed"), status=status)

                solved_count = await self.db.count_solved_entries(attempt_id)
                if solved_count >= len(entries):
                    if await self.db.complete_attempt(attempt_id, now):
                        logger.info(f"Attempt {attempt_id} completed ({solved_count}/{len(entries)})")
                    status = "completed"
            elif result.reason == "no_match":
                await self.db.increment_wrong_guesses(attempt_id, now)

            return RosterGuessOutcome(result=result, status=status)

    async def reset(self, attempt_id: int, user_id: str) -> bool:
        """Clear an attempt back to in_progress. Returns False if not found."""
        async with self._lock_for(attempt_id):
            attempt = await self.db.get_attempt(attempt_id, user_id)
            if not attempt:
                return False
            await self.db.restart_attempt(attempt_id, self.clock())
            logger.info(f"Reset attempt {attempt_id} (was {attempt.status})")
            return True

    async def abandon(self, attempt_id: int, user_id: str) -> bool:
        """Give up on an attempt. Returns False if not found.

        A completed attempt stays completed.
        """
        async with self._lock_for(attempt_id):
            attempt = await self.db.get_attempt(attempt_id, user_id)
            if not attempt:
                return False
            if await self.db.abandon_attempt(attempt_id, self.clock()):
                logger.info(f"Attempt {attempt_id} abandoned")
            return True
