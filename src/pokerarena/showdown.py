"""Showdown evaluation - ranking live hands and paying out each pot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from .card import Card
from .errors import InvariantViolation
from .hand import Hand
from .pot import Pot
from .ranking import HandValue, StandardRanker


class HandRanker(Protocol):
    """Anything that can score a set of 5 to 7 cards.

    The returned value only needs to be totally ordered; higher wins.
    """

    def rank(self, cards: Sequence[Card]) -> Any: ...


@dataclass(frozen=True)
class PotAward:
    """How one pot was paid out."""

    pot: Pot
    winners: tuple[str, ...]
    shares: dict[str, int]
    value: HandValue | None = None

    @property
    def is_split(self) -> bool:
        return len(self.winners) > 1


def split(amount: int, winners: Sequence[str]) -> dict[str, int]:
    """Divide ``amount`` equally; the odd chips go to the first winner.

    ``winners`` must already be in seat order.
    """
    if not winners:
        raise ValueError("cannot split a pot between zero winners")
    share, remainder = divmod(amount, len(winners))
    shares = {pid: share for pid in winners}
    shares[winners[0]] += remainder
    return shares


@dataclass
class ShowdownEvaluator:
    """Resolves each pot independently among its eligible hands."""

    ranker: HandRanker = field(default_factory=StandardRanker)

    def rank_hands(self, hands: Sequence[Hand], community: list[Card]) -> dict[str, Any]:
        """Score every listed hand against the board."""
        return {h.player_id: self.ranker.rank(h.hole_cards + community) for h in hands}

    def winners(self, hands: Sequence[Hand], community: list[Card]) -> list[Hand]:
        """All hands sharing the best value, in seat order."""
        values = self.rank_hands(hands, community)
        best = max(values.values())
        return sorted((h for h in hands if values[h.player_id] == best), key=lambda h: h.seat)

    def settle(
        self,
        pots: Sequence[Pot],
        hands: Sequence[Hand],
        community: list[Card],
    ) -> list[PotAward]:
        """Pay out every pot. Does not touch stacks; the caller applies the shares."""
        if len(community) < 5:
            raise ValueError(f"Need 5 community cards, got {len(community)}")

        by_id = {h.player_id: h for h in hands}
        awards: list[PotAward] = []
        for pot in pots:
            contenders = [by_id[pid] for pid in pot.eligible if by_id[pid].in_hand]
            if not contenders:
                raise InvariantViolation(
                    "pot has no live hand to pay",
                    {"amount": pot.amount, "eligible": list(pot.eligible)},
                )
            values = self.rank_hands(contenders, community)
            top = max(values.values())
            ids = tuple(
                h.player_id
                for h in sorted(contenders, key=lambda h: h.seat)
                if values[h.player_id] == top
            )
            awards.append(
                PotAward(
                    pot=pot,
                    winners=ids,
                    shares=split(pot.amount, ids),
                    value=top if isinstance(top, HandValue) else None,
                )
            )
        return awards
