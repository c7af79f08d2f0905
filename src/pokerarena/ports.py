"""Interfaces the engine talks through: decisions, persistence and settlement."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .action import Action
from .card import Card
from .player import DecisionRequest

if TYPE_CHECKING:
    from .settlement import Loss, Win
    from .storage import Record


@runtime_checkable
class DecisionProvider(Protocol):
    """Chooses an action for one seat.

    ``decide`` may take as long as it likes; the betting engine bounds it with
    a timeout and folds the hand if it is exceeded.
    """

    async def decide(self, request: DecisionRequest) -> Action: ...


@runtime_checkable
class Observer(Protocol):
    """Optional provider hook called after each hand.

    Returns replacement notes for the player, or None to keep the old ones.
    """

    async def observe(self, summary: RoundSummary) -> str | None: ...


class PersistenceStore(Protocol):
    async def append(self, record: Record) -> None: ...

    async def get(self, kind: str, record_id: str) -> Record | None: ...


class SettlementNotifier(Protocol):
    async def notify(self, losers: list[Loss], winners: list[Win], game_id: str) -> None: ...


@dataclass(frozen=True)
class RoundSummary:
    """What one player gets to review once a hand is over."""

    game_id: str
    hand_number: int
    player_id: str
    notes: str
    community: list[Card]
    context: list[str] = field(default_factory=list)
    deltas: dict[str, int] = field(default_factory=dict)
    shown: dict[str, list[Card]] = field(default_factory=dict)

    @property
    def net(self) -> int:
        return self.deltas.get(self.player_id, 0)
