"""Exception hierarchy for the game engine."""

from __future__ import annotations

from typing import Any


class PokerArenaError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(PokerArenaError, ValueError):
    """The game configuration is unusable; the session never starts."""


class DecisionProviderError(PokerArenaError):
    """A decision provider timed out, raised, or returned a malformed action.

    Handled inside the betting loop as an automatic fold.
    """

    def __init__(self, player_id: str, reason: str) -> None:
        super().__init__(f"{player_id}: {reason}")
        self.player_id = player_id
        self.reason = reason


class PersistenceError(PokerArenaError):
    """A record could not be written to or read from the store."""


class InvariantViolation(PokerArenaError):
    """The ledger or table state is inconsistent.

    Fatal to the current round. ``state`` carries a dump of the round for
    diagnosis.
    """

    def __init__(self, message: str, state: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.state: dict[str, Any] = state or {}
