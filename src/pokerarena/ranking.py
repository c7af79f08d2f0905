"""Texas Hold'em hand ranking: best five cards out of seven."""

from collections import Counter
from dataclasses import dataclass, field
from enum import IntEnum
from itertools import combinations
from typing import Sequence

from .card import Card, Rank


class HandCategory(IntEnum):
    """Hand categories from lowest to highest."""

    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


@dataclass(frozen=True, slots=True, order=True)
class HandValue:
    """Comparable strength of a five-card hand.

    Ordering compares the category first, then ``primary`` (the ranks that
    make the hand, e.g. the pair), then the kickers. The cards themselves do
    not take part in comparisons.
    """

    category: HandCategory
    primary: tuple[int, ...]
    kickers: tuple[int, ...]
    cards: tuple[Card, ...] = field(default=(), compare=False)

    def describe(self) -> str:
        top = Rank(self.primary[0])
        match self.category:
            case HandCategory.ONE_PAIR:
                return f"Pair of {top.plural}"
            case HandCategory.TWO_PAIR:
                return f"Two Pair, {top.plural} and {Rank(self.primary[1]).plural}"
            case HandCategory.THREE_OF_A_KIND:
                return f"Three {top.plural}"
            case HandCategory.FOUR_OF_A_KIND:
                return f"Four {top.plural}"
            case HandCategory.FULL_HOUSE:
                return f"Full House, {top.plural} full of {Rank(self.primary[1]).plural}"
            case HandCategory.STRAIGHT | HandCategory.STRAIGHT_FLUSH | HandCategory.FLUSH:
                return f"{self.category}, {top.name.capitalize()} high"
            case _:
                return f"{top.name.capitalize()} High"

    def __str__(self) -> str:
        return str(self.category)


class StandardRanker:
    """Exhaustive best-five-of-n evaluator (21 combinations for 7 cards)."""

    def rank(self, cards: Sequence[Card]) -> HandValue:
        if len(cards) < 5:
            raise ValueError(f"Need at least 5 cards to rank a hand, got {len(cards)}")
        if len(set(cards)) != len(cards):
            raise ValueError("Duplicate cards in hand")
        return max(rank_five(combo) for combo in combinations(cards, 5))


def rank_five(cards: Sequence[Card]) -> HandValue:
    """Evaluate exactly five cards."""
    ranks = sorted((c.rank.value for c in cards), reverse=True)
    counts = Counter(ranks)
    # Ranks ordered by (count, rank): quads before trips before pairs
    grouped = sorted(counts, key=lambda r: (counts[r], r), reverse=True)
    shape = sorted(counts.values(), reverse=True)
    flush = len({c.suit for c in cards}) == 1
    straight_high = _straight_high(ranks)
    held = tuple(cards)

    if flush and straight_high:
        return HandValue(HandCategory.STRAIGHT_FLUSH, (straight_high,), (), held)
    if shape == [4, 1]:
        return HandValue(HandCategory.FOUR_OF_A_KIND, (grouped[0],), (grouped[1],), held)
    if shape == [3, 2]:
        return HandValue(HandCategory.FULL_HOUSE, (grouped[0], grouped[1]), (), held)
    if flush:
        return HandValue(HandCategory.FLUSH, tuple(ranks), (), held)
    if straight_high:
        return HandValue(HandCategory.STRAIGHT, (straight_high,), (), held)
    if shape == [3, 1, 1]:
        return HandValue(HandCategory.THREE_OF_A_KIND, (grouped[0],), tuple(grouped[1:]), held)
    if shape == [2, 2, 1]:
        return HandValue(HandCategory.TWO_PAIR, (grouped[0], grouped[1]), (grouped[2],), held)
    if shape == [2, 1, 1, 1]:
        return HandValue(HandCategory.ONE_PAIR, (grouped[0],), tuple(grouped[1:]), held)
    return HandValue(HandCategory.HIGH_CARD, (ranks[0],), tuple(ranks[1:]), held)


def _straight_high(ranks: list[int]) -> int:
    """High card of a straight in descending ``ranks``, or 0."""
    if len(set(ranks)) != 5:
        return 0
    if ranks[0] - ranks[4] == 4:
        return ranks[0]
    # Wheel: A-2-3-4-5 plays the ace low
    if ranks == [14, 5, 4, 3, 2]:
        return 5
    return 0
