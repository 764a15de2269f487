"""Engine-level errors."""

from __future__ import annotations


class SelectionError(Exception):
    pass


class InvalidConstraint(SelectionError, ValueError):
    """Caller supplied constraints that cannot be scored (e.g. radius <= 0)."""


class NoEligibleCandidates(SelectionError, LookupError):
    """Nothing survived geo-filtering and score vetoes."""

    def __init__(self, message: str = "No eligible restaurants found", *, considered: int = 0) -> None:
        super().__init__(message)
        self.considered = considered
