"""Seated participants and what they see when asked to act."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .action import Street
from .card import Card


class OccupantKind(Enum):
    AGENT = "agent"
    EMPTY = "empty"


@dataclass
class Player:
    """A seat's occupant for the whole game.

    Empty seats are players too, with ``kind == EMPTY`` and no chips, so that
    every loop over seats can treat them uniformly.
    """

    id: str
    label: str
    seat: int
    stack: int = 0
    kind: OccupantKind = OccupantKind.AGENT
    agent: str | None = None
    notes: str = ""
    sitting_out: bool = False

    @classmethod
    def empty(cls, seat: int, player_id: str | None = None) -> Player:
        return cls(
            id=player_id or f"seat{seat}",
            label=f"Empty Seat {seat + 1}",
            seat=seat,
            kind=OccupantKind.EMPTY,
        )

    @property
    def is_empty(self) -> bool:
        return self.kind == OccupantKind.EMPTY

    @property
    def is_occupied(self) -> bool:
        """Dealt into hands: an agent that is not sitting out."""
        return self.kind == OccupantKind.AGENT and not self.sitting_out

    @property
    def is_busted(self) -> bool:
        return self.kind == OccupantKind.AGENT and self.stack == 0


@dataclass(frozen=True)
class DecisionRequest:
    """Read-only snapshot given to a decision provider.

    All amounts are in chips.
    """

    player_id: str
    street: Street
    hole_cards: list[Card]
    community: list[Card]
    bet_to_call: int
    pot: int
    stack: int
    position: str
    context: list[str] = field(default_factory=list)
    notes: str = ""

    @property
    def can_check(self) -> bool:
        return self.bet_to_call == 0
