"""The 52-card deck a hand is dealt from."""

import random
from dataclasses import dataclass, field
from typing import Self

from .card import Card, Rank, Suit


def full_deck() -> list[Card]:
    return [Card(rank, suit) for suit in Suit for rank in Rank]


@dataclass
class Deck:
    """A deck consumed from the top (index 0) as cards are dealt."""

    cards: list[Card] = field(default_factory=full_deck)

    @classmethod
    def shuffled(cls, rng: random.Random | None = None) -> Self:
        deck = full_deck()
        (rng or random).shuffle(deck)
        return cls(cards=deck)

    @classmethod
    def stacked(cls, top: list[Card]) -> Self:
        """A deck whose first cards are ``top``, followed by the rest in order.

        Used to replay a known deal.
        """
        if len(set(top)) != len(top):
            raise ValueError("Stacked cards must be unique")
        rest = [c for c in full_deck() if c not in top]
        return cls(cards=list(top) + rest)

    def deal(self, n: int = 1) -> list[Card]:
        """Deal n cards from the top of the deck."""
        if n > len(self.cards):
            raise ValueError(f"Cannot deal {n} cards, only {len(self.cards)} remaining")
        dealt, self.cards = self.cards[:n], self.cards[n:]
        return dealt

    def __len__(self) -> int:
        return len(self.cards)

    def __contains__(self, card: Card) -> bool:
        return card in self.cards
