"""Named failures raised by the game services.

A guess that matches nothing is not an error; it comes back as a NoMatch
value or a "wrong" daily response. These exceptions cover the cases the
caller has to turn into a user-facing message.
"""


class GameError(Exception):
    """Base class for game service failures."""


class NotFound(GameError):
    """The attempt or set doesn't exist, or isn't owned by the acting user."""


class NotInProgress(GameError):
    """A guess was made on an attempt that is completed or abandoned."""

    def __init__(self, attempt_id: int, status: str):
        super().__init__(f"Attempt {attempt_id} is {status}, not in_progress")
        self.attempt_id = attempt_id
        self.status = status


class NoCandidates(GameError):
    """The daily candidate pool is empty."""


class NoDailyTarget(GameError):
    """No player of the day is available for this scope."""

    def __init__(self, scope_key: str):
        super().__init__(f"No player of the day available for {scope_key}")
        self.scope_key = scope_key
