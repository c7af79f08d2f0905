"""Pot accounting with side pot calculation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .errors import InvariantViolation
from .hand import Hand


@dataclass(frozen=True)
class Pot:
    """A single pot (main or side) with the players who can win it.

    ``tier`` is the cumulative contribution that caps the pot; the last pot
    above every all-in level has no tier.
    """

    amount: int
    eligible: tuple[str, ...]
    tier: int | None = None


@dataclass
class PotLedger:
    """Tracks every chip committed this round, per player and per street."""

    _contributions: dict[str, int] = field(default_factory=dict)
    _street_total: int = 0
    _total: int = 0

    def commit(self, player_id: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"cannot commit a negative amount ({amount})")
        self._contributions[player_id] = self._contributions.get(player_id, 0) + amount
        self._street_total += amount
        self._total += amount

    def end_street(self) -> int:
        """Close the current street and return the chips it collected."""
        collected = self._street_total
        self._street_total = 0
        return collected

    @property
    def total(self) -> int:
        return self._total

    @property
    def street_total(self) -> int:
        return self._street_total

    def contribution(self, player_id: str) -> int:
        return self._contributions.get(player_id, 0)

    @property
    def contributions(self) -> dict[str, int]:
        return dict(self._contributions)

    def verify(self, hands: Sequence[Hand]) -> None:
        """Check the ledger against the hands' own running totals."""
        committed = {h.player_id: h.committed for h in hands if h.committed}
        recorded = {pid: amount for pid, amount in self._contributions.items() if amount}
        if committed != recorded or sum(recorded.values()) != self._total:
            raise InvariantViolation(
                "ledger contributions do not match hand commitments",
                {"ledger": recorded, "hands": committed, "total": self._total},
            )

    def compute_pots(self, hands: Sequence[Hand]) -> list[Pot]:
        """Split the round's contributions into main and side pots.

        Algorithm:
        1. Tiers are the distinct contributions of non-folded all-in hands,
           ascending.
        2. The pot for tier (prev, tier] takes every hand's contribution that
           falls inside that band. Folded hands' chips stay in the band they
           were committed in, as dead money.
        3. Eligible = non-folded hands that contributed at least the tier.
        4. Whatever was committed above the highest tier forms a last pot for
           the non-folded hands that went beyond it.
        """
        self.verify(hands)
        live = [h for h in hands if h.in_hand]
        tiers = sorted({self.contribution(h.player_id) for h in live if h.all_in})

        if not tiers:
            if self._total == 0:
                return []
            pot = Pot(amount=self._total, eligible=tuple(h.player_id for h in live))
            self._check_pots([pot], hands)
            return [pot]

        pots: list[Pot] = []
        previous = 0
        for tier in tiers:
            amount = self._band(previous, tier)
            eligible = tuple(h.player_id for h in live if self.contribution(h.player_id) >= tier)
            if amount > 0:
                pots.append(Pot(amount=amount, eligible=eligible, tier=tier))
            previous = tier

        remaining = sum(max(0, c - previous) for c in self._contributions.values())
        if remaining > 0:
            eligible = tuple(h.player_id for h in live if self.contribution(h.player_id) > previous)
            pots.append(Pot(amount=remaining, eligible=eligible))

        self._check_pots(pots, hands)
        return pots

    def _band(self, low: int, high: int) -> int:
        return sum(min(c, high) - min(c, low) for c in self._contributions.values())

    def _check_pots(self, pots: list[Pot], hands: Sequence[Hand]) -> None:
        state = {
            "pots": [(p.amount, list(p.eligible), p.tier) for p in pots],
            "contributions": self.contributions,
            "folded": [h.player_id for h in hands if h.folded and not h.placeholder],
            "all_in": [h.player_id for h in hands if h.all_in],
        }
        for pot in pots:
            if pot.amount > 0 and not pot.eligible:
                raise InvariantViolation(f"no eligible hands for pot at tier {pot.tier}", state)
        if sum(p.amount for p in pots) != self._total:
            raise InvariantViolation("pots do not add up to the chips committed", state)
