from __future__ import annotations


class MatchEngineError(RuntimeError):
    """Base error for the possession engine."""


class PreconditionError(MatchEngineError):
    """Raised when roster/on-court preconditions cannot be satisfied (fatal)."""


class UnknownTeamError(MatchEngineError, ValueError):
    """Raised when a query references a team that is not part of the game."""


class UnknownPlayerError(MatchEngineError, ValueError):
    """Raised when a query references a player that is not part of the game."""
