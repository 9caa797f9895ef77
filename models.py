"""Pydantic models for game data structures."""

import json
from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

AttemptStatus = Literal["in_progress", "completed", "abandoned"]
DailyStatus = Literal["playing", "won", "lost"]
NoMatchReason = Literal["already_guessed", "no_match"]
Feedback = Literal["correct", "close", "wrong"]


def _decode_json(value: Any) -> Any:
    """SQLite hands JSON columns back as text."""
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


# Reference data (owned by the seeding process)


class ReferenceSet(BaseModel):
    """A named pool of guessable entries, e.g. a historic squad."""

    id: int
    slug: str
    title: str
    club_name: str
    season: Optional[int] = None
    competition: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None

    @field_validator("metadata", mode="before")
    @classmethod
    def decode_metadata(cls, value: Any) -> Any:
        return _decode_json(value)


class ReferenceSetSummary(ReferenceSet):
    """A reference set with the number of entries attached to it."""

    entry_count: int = 0


class ReferenceEntry(BaseModel):
    """One guessable player inside a reference set."""

    id: int
    set_id: int
    display_name: str
    normalized_name: str
    aliases: list[str] = Field(default_factory=list)
    jersey_number: Optional[int] = None
    sort_order: int = 0

    @field_validator("aliases", mode="before")
    @classmethod
    def decode_aliases(cls, value: Any) -> Any:
        if value is None:
            return []
        return _decode_json(value)


class ReferenceSetDetail(BaseModel):
    """A reference set with its entries in display order."""

    reference_set: ReferenceSet
    entries: list[ReferenceEntry]


# Roster guessing


class Attempt(BaseModel):
    """A user's session against one reference set."""

    id: int
    user_id: str
    set_id: int
    status: AttemptStatus = "in_progress"
    wrong_guesses: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AttemptGuess(BaseModel):
    """A correct guess recorded under an attempt."""

    id: int
    attempt_id: int
    entry_id: int
    guessed_text: str
    matched_score: float
    created_at: Optional[datetime] = None


class Matched(BaseModel):
    """The guess identified exactly one not-yet-solved entry."""

    matched: Literal[True] = True
    entry_id: int
    display_name: str
    jersey_number: Optional[int] = None
    score: float


class NoMatch(BaseModel):
    """The guess did not identify a new entry."""

    matched: Literal[False] = False
    reason: NoMatchReason


MatchResult = Union[Matched, NoMatch]


class AttemptStart(BaseModel):
    """Result of starting (or resuming) an attempt."""

    attempt_id: int
    solved_entry_ids: list[int] = Field(default_factory=list)


class RosterGuessOutcome(BaseModel):
    """Result of a roster guess along with the attempt's new status."""

    result: MatchResult
    status: AttemptStatus


class AttemptView(BaseModel):
    """An attempt with everything needed to render its board."""

    id: int
    status: AttemptStatus
    wrong_guesses: int
    solved_entry_ids: list[int]
    reference_set: ReferenceSet
    entries: list[ReferenceEntry]


# Player of the day


class SquadPlayer(BaseModel):
    """A current squad member eligible to be the player of the day."""

    id: int
    team_id: str
    name: str
    known_name: Optional[str] = None
    position: str
    shirt_number: Optional[int] = None
    photo_url: Optional[str] = None

    @property
    def primary_name(self) -> str:
        return self.known_name or self.name

    @property
    def name_variants(self) -> list[str]:
        return [name for name in (self.known_name, self.name) if name]


class DailyTarget(BaseModel):
    """The player deterministically chosen for a date and scope."""

    id: int
    date_key: str
    scope_key: str
    player_id: int
    seed_used: int
    created_at: Optional[datetime] = None


class DailyGuessLogEntry(BaseModel):
    text: str
    normalized: str
    correct: bool


class DailyProgress(BaseModel):
    """A user's bounded-attempt session against one daily target."""

    id: int
    user_id: str
    date_key: str
    target_id: int
    attempts: int = 0
    wrong_attempts: int = 0
    guessed: bool = False
    lost: bool = False
    guesses: list[DailyGuessLogEntry] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("guesses", mode="before")
    @classmethod
    def decode_guesses(cls, value: Any) -> Any:
        return _decode_json(value)

    @property
    def status(self) -> DailyStatus:
        if self.guessed:
            return "won"
        if self.lost:
            return "lost"
        return "playing"


class DailyGuessResponse(BaseModel):
    """What a daily guess reports back to the caller."""

    correct: bool
    feedback: Feedback
    status: DailyStatus
    wrong_attempts: int
    blur_percent: int
    attempts_left: int
    reveal_name: Optional[str] = None


class DailyPlayerCard(BaseModel):
    """The target as shown to the player; the name stays hidden while playing."""

    id: int
    position: str
    shirt_number: Optional[int] = None
    photo_url: Optional[str] = None
    name: Optional[str] = None


class DailyProgressView(BaseModel):
    attempts: int
    wrong_attempts: int
    guessed: bool
    lost: bool
    guesses: list[DailyGuessLogEntry]
    blur_percent: int
    attempts_left: int


class PlayerOfTheDay(BaseModel):
    """Full daily game state for one user."""

    date_key: str
    player: DailyPlayerCard
    progress: DailyProgressView
    status: DailyStatus


class PlayerSearchResult(BaseModel):
    id: int
    name: str
    position: str
    photo_url: Optional[str] = None
