"""Betting round state machine for a single street."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Sequence

from .action import Action, ActionRecord, ActionType, Street
from .card import Card
from .errors import DecisionProviderError
from .hand import Hand
from .player import DecisionRequest, Player
from .ports import DecisionProvider
from .pot import PotLedger
from .seating import SeatTable

logger = logging.getLogger(__name__)


@dataclass
class StreetResult:
    """What happened on one street."""

    street: Street
    highest_bet: int
    collected: int
    actions: list[ActionRecord] = field(default_factory=list)
    auto_folds: list[str] = field(default_factory=list)


def move_chips(player: Player, hand: Hand, ledger: PotLedger, amount: int) -> int:
    """Take up to ``amount`` from the stack into the hand and the ledger.

    Returns the chips actually moved; an emptied stack marks the hand all-in.
    """
    actual = max(0, min(amount, player.stack))
    player.stack -= actual
    hand.add_chips(actual)
    ledger.commit(hand.player_id, actual)
    if player.stack == 0:
        hand.all_in = True
    return actual


def post_blind(
    player: Player,
    hand: Hand,
    ledger: PotLedger,
    amount: int,
    reasoning: str,
) -> ActionRecord:
    """Post a forced blind. Does not mark the hand as having acted."""
    actual = move_chips(player, hand, ledger, amount)
    return ActionRecord(
        player_id=hand.player_id,
        seat=hand.seat,
        street=Street.PREFLOP,
        type=ActionType.BET,
        amount=actual,
        reasoning=reasoning,
        total_in_street=hand.amount,
        stack_after=player.stack,
        blind=True,
        all_in=hand.all_in,
    )


@dataclass
class BettingRound:
    """Runs one street of betting.

    Seats are visited in order from ``start``, wrapping around. The street is
    over when every hand that can still act has acted and matched the highest
    bet, or when at most one hand is left in.
    """

    street: Street
    hands: list[Hand]
    players: list[Player]
    providers: Mapping[str, DecisionProvider]
    ledger: PotLedger
    seats: SeatTable
    community: list[Card] = field(default_factory=list)
    highest_bet: int = 0
    context: list[str] = field(default_factory=list)
    decision_timeout: float | None = 30.0
    turn_delay: float = 0.0
    on_action: Callable[[ActionRecord], None] | None = None

    def live_hands(self) -> list[Hand]:
        return [h for h in self.hands if h.in_hand]

    def is_complete(self) -> bool:
        live = self.live_hands()
        if len(live) <= 1:
            return True
        return all(h.acted and h.amount == self.highest_bet for h in live if not h.all_in)

    def needs_action(self, hand: Hand) -> bool:
        if not hand.can_act or hand.placeholder:
            return False
        return not (hand.acted and hand.amount == self.highest_bet)

    async def run(self, start: int) -> StreetResult:
        """Drive the street to completion starting from seat ``start``."""
        result = StreetResult(street=self.street, highest_bet=self.highest_bet, collected=0)
        seat_count = len(self.hands)
        seat = start % seat_count
        logger.debug("%s betting starts at seat %d, highest bet %d", self.street, seat, self.highest_bet)

        while not self.is_complete():
            hand = self.hands[seat]
            if self.needs_action(hand):
                try:
                    action = await self._decide(hand)
                    auto = False
                except DecisionProviderError as exc:
                    logger.warning("Auto-folding %s: %s", exc.player_id, exc.reason)
                    action = Action.fold(f"Automatic fold: {exc.reason}")
                    auto = True
                    result.auto_folds.append(hand.player_id)

                record = self.apply(hand, action, auto=auto)
                result.actions.append(record)
                self.context.append(record.describe())
                if self.on_action:
                    self.on_action(record)

                if self.turn_delay and not self.is_complete():
                    await asyncio.sleep(self.turn_delay)
            seat = (seat + 1) % seat_count

        result.highest_bet = self.highest_bet
        result.collected = self.ledger.street_total
        return result

    def apply(self, hand: Hand, action: Action, auto: bool = False) -> ActionRecord:
        """Apply a decision to the hand, the stack and the ledger."""
        player = self.players[hand.seat]
        to_call = self.highest_bet - hand.amount
        kind = action.type

        # Normalise the decision to what the table allows
        if kind == ActionType.CHECK and to_call > 0:
            logger.info("%s tried to check facing %d; treating as a fold", hand.player_id, to_call)
            kind = ActionType.FOLD
        elif kind == ActionType.BET and action.amount <= 0:
            kind = ActionType.CHECK if to_call == 0 else ActionType.FOLD

        moved = 0
        raised = False
        if kind == ActionType.FOLD:
            hand.folded = True
        elif kind == ActionType.BET:
            wanted = action.amount
            if wanted < to_call and wanted < player.stack:
                # Short of a call without being all-in: top it up to a call
                wanted = to_call
            moved = move_chips(player, hand, self.ledger, wanted)
            if hand.amount > self.highest_bet:
                self.highest_bet = hand.amount
                raised = True
                for other in self.hands:
                    if other is not hand and other.can_act and not other.placeholder:
                        other.acted = False
        hand.acted = True

        logger.debug(
            "%s %s %d (in street %d, stack %d)",
            hand.player_id, kind.value, moved, hand.amount, player.stack,
        )
        return ActionRecord(
            player_id=hand.player_id,
            seat=hand.seat,
            street=self.street,
            type=kind,
            amount=moved,
            reasoning=action.reasoning,
            total_in_street=hand.amount,
            stack_after=player.stack,
            auto=auto,
            raised=raised,
            all_in=kind == ActionType.BET and hand.all_in,
        )

    def request_for(self, hand: Hand) -> DecisionRequest:
        player = self.players[hand.seat]
        return DecisionRequest(
            player_id=hand.player_id,
            street=self.street,
            hole_cards=list(hand.hole_cards),
            community=list(self.community),
            bet_to_call=self.highest_bet - hand.amount,
            pot=self.ledger.total,
            stack=player.stack,
            position=self.seats.label(hand.seat),
            context=list(self.context),
            notes=player.notes,
        )

    async def _decide(self, hand: Hand) -> Action:
        """Ask the seat's provider, converting every failure into DecisionProviderError."""
        provider = self.providers.get(hand.player_id)
        if provider is None:
            raise DecisionProviderError(hand.player_id, "no decision provider")

        request = self.request_for(hand)
        try:
            action = await asyncio.wait_for(provider.decide(request), self.decision_timeout)
        except asyncio.TimeoutError:
            raise DecisionProviderError(
                hand.player_id, f"no decision within {self.decision_timeout}s"
            ) from None
        except Exception as exc:
            raise DecisionProviderError(hand.player_id, f"provider raised {exc!r}") from exc

        return validate_action(hand.player_id, action)


def validate_action(player_id: str, action: object) -> Action:
    """Reject anything that is not a well-formed Action."""
    if not isinstance(action, Action) or not isinstance(action.type, ActionType):
        raise DecisionProviderError(player_id, f"malformed decision {action!r}")
    if isinstance(action.amount, bool) or not isinstance(action.amount, int):
        raise DecisionProviderError(player_id, f"non-integer amount {action.amount!r}")
    if action.amount < 0:
        raise DecisionProviderError(player_id, f"negative amount {action.amount}")
    return action


def can_bet(hands: Sequence[Hand], highest_bet: int) -> bool:
    """Whether a street needs any betting at all.

    False when fewer than two hands can still act and none of them is
    facing a bet; the board is then simply run out.
    """
    live = [h for h in hands if h.in_hand]
    if len(live) <= 1:
        return False
    actors = [h for h in live if h.can_act]
    if len(actors) >= 2:
        return True
    return any(h.amount < highest_bet for h in actors)
