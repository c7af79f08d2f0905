"""Per-round state of one seat."""

from __future__ import annotations

from dataclasses import dataclass, field

from .card import Card
from .player import Player


@dataclass
class Hand:
    """One seat's hand for the current round.

    ``amount`` is what the seat has put in on the current street;
    ``committed`` is the running total for the whole round.
    """

    player_id: str
    seat: int
    hole_cards: list[Card] = field(default_factory=list)
    amount: int = 0
    committed: int = 0
    folded: bool = False
    all_in: bool = False
    acted: bool = False
    placeholder: bool = False

    @classmethod
    def dealt(cls, player: Player, hole_cards: list[Card]) -> Hand:
        return cls(player_id=player.id, seat=player.seat, hole_cards=list(hole_cards))

    @classmethod
    def for_empty_seat(cls, player: Player) -> Hand:
        """A pre-folded hand with no cards, so empty seats never act."""
        return cls(
            player_id=player.id,
            seat=player.seat,
            folded=True,
            acted=True,
            placeholder=True,
        )

    @property
    def in_hand(self) -> bool:
        """Still competing for the pot."""
        return not self.folded

    @property
    def can_act(self) -> bool:
        return not self.folded and not self.all_in

    def add_chips(self, amount: int) -> None:
        self.amount += amount
        self.committed += amount

    def reset_for_street(self) -> None:
        self.amount = 0
        if not self.placeholder:
            self.acted = False
