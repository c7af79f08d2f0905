"""Playing cards as dealt at the table."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Self


class Suit(IntEnum):
    """Card suits. Suits never break ties between hands."""

    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3

    @property
    def letter(self) -> str:
        return "cdhs"[self.value]

    @property
    def symbol(self) -> str:
        """Unicode symbol, used by the terminal display."""
        return "♣♦♥♠"[self.value]

    @property
    def is_red(self) -> bool:
        return self in (Suit.DIAMONDS, Suit.HEARTS)


class Rank(IntEnum):
    """Card ranks. Higher value = higher rank, aces are high."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def letter(self) -> str:
        """Single-character rank used in card codes ('T' for ten)."""
        return "23456789TJQKA"[self.value - 2]

    @property
    def plural(self) -> str:
        names = {
            11: "Jacks",
            12: "Queens",
            13: "Kings",
            14: "Aces",
            6: "Sixes",
        }
        if self.value in names:
            return names[self.value]
        return f"{self.name.capitalize()}s"


_RANKS = {r.letter: r for r in Rank} | {"10": Rank.TEN}
_SUITS = {s.letter: s for s in Suit}


@dataclass(frozen=True, slots=True)
class Card:
    """A playing card. ``str(card)`` gives the two-letter code, e.g. ``As``."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank.letter}{self.suit.letter}"

    def __repr__(self) -> str:
        return f"Card({self})"

    @property
    def symbol(self) -> str:
        return f"{self.rank.letter}{self.suit.symbol}"

    @classmethod
    def from_str(cls, s: str) -> Self:
        """Parse a card code such as 'As', 'Td', '10d' or '2c'."""
        token = s.strip()
        if len(token) < 2:
            raise ValueError(f"Invalid card string: {s!r}")

        rank = _RANKS.get(token[:-1].upper())
        if rank is None:
            raise ValueError(f"Invalid rank in {s!r}")
        suit = _SUITS.get(token[-1].lower())
        if suit is None:
            raise ValueError(f"Invalid suit in {s!r}")
        return cls(rank=rank, suit=suit)


def card(s: str) -> Card:
    """Shorthand for Card.from_str()."""
    return Card.from_str(s)


def cards(s: str) -> list[Card]:
    """Parse a space or comma separated list of card codes."""
    return [card(token) for token in s.replace(",", " ").split() if token]


def format_cards(hand: list[Card]) -> str:
    return " ".join(str(c) for c in hand) if hand else "none"
