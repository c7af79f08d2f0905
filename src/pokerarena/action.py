"""Actions a seat can take, and the record of what was applied."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Street(Enum):
    """The four betting phases of a hand."""

    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"

    @property
    def cards_to_reveal(self) -> int:
        """Community cards turned face up when the street begins."""
        return {"preflop": 0, "flop": 3, "turn": 1, "river": 1}[self.value]

    def __str__(self) -> str:
        return self.value


class ActionType(Enum):
    """What a decision provider may answer.

    BET covers calls, raises and all-ins alike: "commit N more chips".
    """

    FOLD = "fold"
    CHECK = "check"
    BET = "bet"


@dataclass(frozen=True)
class Action:
    """A decision returned by a provider.

    Attributes:
        type: The action type.
        amount: Chips to add this turn for BET, 0 otherwise.
        reasoning: Free-text explanation, kept in the action log.
    """

    type: ActionType
    amount: int = 0
    reasoning: str = ""

    @classmethod
    def fold(cls, reasoning: str = "") -> Action:
        return cls(ActionType.FOLD, 0, reasoning)

    @classmethod
    def check(cls, reasoning: str = "") -> Action:
        return cls(ActionType.CHECK, 0, reasoning)

    @classmethod
    def bet(cls, amount: int, reasoning: str = "") -> Action:
        return cls(ActionType.BET, amount, reasoning)

    def __str__(self) -> str:
        if self.type == ActionType.BET:
            return f"Bet {self.amount}"
        return self.type.value.capitalize()


@dataclass(frozen=True)
class ActionRecord:
    """An action as it was applied to the table.

    ``amount`` is the number of chips actually moved, after clamping to the
    stack. ``blind`` marks forced blind posts; ``auto`` marks folds forced by a
    failing decision provider.
    """

    player_id: str
    seat: int
    street: Street
    type: ActionType
    amount: int
    reasoning: str
    total_in_street: int
    stack_after: int
    blind: bool = False
    auto: bool = False
    raised: bool = False
    all_in: bool = False

    def describe(self, label: str | None = None) -> str:
        """One line for the context log handed to providers."""
        who = label or self.player_id
        if self.blind:
            return f"{who} {self.reasoning.lower()}"
        if self.type == ActionType.FOLD:
            return f"{who} folded"
        if self.type == ActionType.CHECK:
            return f"{who} checked"
        if self.all_in:
            return f"{who} went all-in with {self.amount}"
        if self.raised:
            return f"{who} raised to {self.total_in_street} (bet {self.amount} chips)"
        return f"{who} called {self.amount}"
