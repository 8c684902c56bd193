"""Errors surfaced by the matching engine to its caller.

Per-candidate problems never show up here: they remove one candidate from the
ranking and are only logged. Only requester-level faults and caller-initiated
aborts reach the caller.
"""


class UserNotFound(LookupError):
    """Raised when a user profile (or required preferences) cannot be loaded."""

    def __init__(self, user_id: str, what: str = "user"):
        self.user_id = user_id
        self.what = what
        super().__init__(f"{what} not found for {user_id!r}")


class RequesterNotFound(UserNotFound):
    """Raised when the requester profile or its preferences are missing."""


class RankingCancelled(RuntimeError):
    """Raised when a ranking run hits its deadline or is cancelled by the caller.

    Partial results are discarded; ``completed`` and ``total`` describe how far
    the run got.
    """

    def __init__(self, reason: str, completed: int = 0, total: int = 0):
        self.reason = reason
        self.completed = completed
        self.total = total
        super().__init__(f"Ranking cancelled ({reason}) after {completed}/{total} candidates")


__all__ = ["UserNotFound", "RequesterNotFound", "RankingCancelled"]
