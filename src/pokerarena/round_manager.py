"""Single-hand orchestrator - deals, posts blinds, runs the streets, settles."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping

from .action import ActionRecord, ActionType, Street
from .betting import BettingRound, StreetResult, can_bet, post_blind
from .card import Card, format_cards
from .config import EngineConfig
from .deck import Deck
from .dispatch import RecordWriter
from .errors import InvariantViolation
from .hand import Hand
from .player import Player
from .ports import DecisionProvider, Observer, RoundSummary
from .pot import Pot, PotLedger
from .seating import SeatTable
from .settlement import SettlementBridge, SettlementEvent
from .showdown import PotAward, ShowdownEvaluator
from .storage import (
    ActionRecordRow,
    BettingRoundRecord,
    HandRecord,
    Record,
    RoundRecord,
    TransactionRecord,
    new_id,
)

logger = logging.getLogger(__name__)


class RoundState(Enum):
    DEALING = "dealing"
    POST_BLINDS = "post_blinds"
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SETTLEMENT = "settlement"


@dataclass
class HandResult:
    """Outcome of a single hand."""

    round_id: str
    hand_number: int
    seats: SeatTable
    community: list[Card]
    pots: list[Pot]
    awards: list[PotAward]
    deltas: dict[str, int]
    went_to_showdown: bool
    actions: list[ActionRecord] = field(default_factory=list)
    context: list[str] = field(default_factory=list)
    shown: dict[str, list[Card]] = field(default_factory=dict)
    # Chips put in per street, blinds included in preflop
    street_totals: dict[Street, int] = field(default_factory=dict)

    @property
    def pot_total(self) -> int:
        return sum(p.amount for p in self.pots)

    @property
    def winners(self) -> list[str]:
        won: list[str] = []
        for award in self.awards:
            won.extend(pid for pid in award.winners if pid not in won)
        return won


@dataclass
class RoundManager:
    """Plays one hand from the deal to settlement.

    ``players`` is indexed by seat and includes empty seats. Stacks on the
    players are updated in place; the caller is expected to snapshot them if
    it needs to undo a failed hand.
    """

    players: list[Player]
    providers: Mapping[str, DecisionProvider]
    deck: Deck
    button: int
    engine: EngineConfig = field(default_factory=EngineConfig)
    game_id: str = ""
    hand_number: int = 1
    evaluator: ShowdownEvaluator = field(default_factory=ShowdownEvaluator)
    records: RecordWriter | None = None
    settlement: SettlementBridge | None = None
    observe_timeout: float = 10.0

    on_action: Callable[[ActionRecord], None] | None = None
    on_deal: Callable[[Street, list[Card]], None] | None = None
    on_showdown: Callable[[list[PotAward]], None] | None = None

    round_id: str = field(default_factory=new_id)
    state: RoundState = RoundState.DEALING
    hands: list[Hand] = field(default_factory=list)
    ledger: PotLedger = field(default_factory=PotLedger)
    community: list[Card] = field(default_factory=list)
    context: list[str] = field(default_factory=list)
    actions: list[ActionRecord] = field(default_factory=list)
    street_totals: dict[Street, int] = field(default_factory=dict)

    async def play(self) -> HandResult:
        """Play the hand. Raises InvariantViolation if the chips stop adding up."""
        seats = SeatTable.resolve(self.players, self.button)
        stacks_before = {p.id: p.stack for p in self.players if not p.is_empty}
        chips_before = sum(stacks_before.values())
        logger.info(
            "Hand %d of %s: button seat %d, SB seat %d, BB seat %d",
            self.hand_number, self.game_id or "game", seats.button, seats.small_blind, seats.big_blind,
        )

        self._deal(seats)
        self._post_blinds(seats)

        for street in Street:
            if self._folded_out():
                break
            self.state = RoundState(street.value)
            self._reveal(street)
            highest_bet = max(h.amount for h in self.hands)
            if can_bet(self.hands, highest_bet):
                start = seats.preflop_start if street == Street.PREFLOP else seats.postflop_start
                result = await self._run_street(street, seats, highest_bet, start)
                self._record_street(result)
            self.street_totals[street] = self.ledger.end_street()
            for hand in self.hands:
                hand.reset_for_street()

        self.state = RoundState.SETTLEMENT
        self._check_chips(chips_before)
        result = self._settle(seats, stacks_before)
        self._check_chips(chips_before, settled=True)

        if self.settlement is not None:
            after = {pid: self.players_by_id[pid].stack for pid in stacks_before}
            self.settlement.emit(SettlementEvent.from_stacks(self.game_id, stacks_before, after))
        self._write(
            RoundRecord(
                id=self.round_id,
                game_id=self.game_id,
                hand_number=self.hand_number,
                button=seats.button,
                community=[str(c) for c in self.community],
                pot=result.pot_total,
                deltas=result.deltas,
            )
        )
        await self._observe(result)
        return result

    @property
    def players_by_id(self) -> dict[str, Player]:
        return {p.id: p for p in self.players}

    # -- dealing -----------------------------------------------------------

    def _deal(self, seats: SeatTable) -> None:
        """Two cards to each occupied seat in seat order; placeholders elsewhere."""
        self.state = RoundState.DEALING
        self.hands = []
        for player in self.players:
            if player.seat in seats.occupied:
                hand = Hand.dealt(player, self.deck.deal(2))
            else:
                hand = Hand.for_empty_seat(player)
            self.hands.append(hand)
            self._write(
                HandRecord(
                    id=f"{self.round_id}:{player.id}",
                    round_id=self.round_id,
                    player_id=player.id,
                    seat=player.seat,
                    hole_cards=[str(c) for c in hand.hole_cards],
                )
            )
        if self.on_deal:
            self.on_deal(Street.PREFLOP, [])

    def _post_blinds(self, seats: SeatTable) -> None:
        self.state = RoundState.POST_BLINDS
        for seat, amount, reasoning in (
            (seats.small_blind, self.engine.small_blind, "Posted the small blind"),
            (seats.big_blind, self.engine.big_blind, "Posted the big blind"),
        ):
            record = post_blind(self.players[seat], self.hands[seat], self.ledger, amount, reasoning)
            self._on_record(record)

    def _reveal(self, street: Street) -> None:
        count = street.cards_to_reveal
        if not count:
            return
        cards = self.deck.deal(count)
        self.community.extend(cards)
        if street == Street.FLOP:
            self.context.append(f"The flop cards are {format_cards(cards)}")
        else:
            self.context.append(f"The {street} card is {format_cards(cards)}")
        logger.debug("%s: %s", street, format_cards(self.community))
        if self.on_deal:
            self.on_deal(street, list(self.community))

    # -- betting -----------------------------------------------------------

    async def _run_street(
        self, street: Street, seats: SeatTable, highest_bet: int, start: int
    ) -> StreetResult:
        betting = BettingRound(
            street=street,
            hands=self.hands,
            players=self.players,
            providers=self.providers,
            ledger=self.ledger,
            seats=seats,
            community=list(self.community),
            highest_bet=highest_bet,
            context=self.context,
            decision_timeout=self.engine.decision_timeout,
            turn_delay=self.engine.turn_delay,
            on_action=self._on_action,
        )
        return await betting.run(start)

    def _on_action(self, record: ActionRecord) -> None:
        # BettingRound already wrote the context line
        self.actions.append(record)
        self._persist_action(record)
        if self.on_action:
            self.on_action(record)

    def _on_record(self, record: ActionRecord) -> None:
        self.context.append(record.describe())
        self._on_action(record)

    def _persist_action(self, record: ActionRecord) -> None:
        self._write(
            ActionRecordRow(
                id=new_id(),
                round_id=self.round_id,
                player_id=record.player_id,
                street=str(record.street),
                type=record.type.value,
                amount=record.amount,
                reasoning=record.reasoning,
                blind=record.blind,
                auto=record.auto,
            )
        )
        if record.type == ActionType.BET and record.amount:
            self._transaction(record.player_id, record.amount, credit=False)

    def _record_street(self, result: StreetResult) -> None:
        self._write(
            BettingRoundRecord(
                id=new_id(),
                round_id=self.round_id,
                street=str(result.street),
                highest_bet=result.highest_bet,
                collected=result.collected,
            )
        )

    def _folded_out(self) -> bool:
        return sum(1 for h in self.hands if h.in_hand) <= 1

    # -- settlement --------------------------------------------------------

    def _settle(self, seats: SeatTable, stacks_before: dict[str, int]) -> HandResult:
        live = [h for h in self.hands if h.in_hand]
        shown: dict[str, list[Card]] = {}

        if len(live) == 1:
            # Everyone else folded: no reveal, no evaluation
            self.ledger.verify(self.hands)
            winner = live[0].player_id
            pot = Pot(amount=self.ledger.total, eligible=(winner,))
            pots = [pot] if pot.amount else []
            awards = [PotAward(pot=pot, winners=(winner,), shares={winner: pot.amount})] if pots else []
            went_to_showdown = False
        else:
            pots = self.ledger.compute_pots(self.hands)
            awards = self.evaluator.settle(pots, self.hands, self.community)
            shown = {h.player_id: list(h.hole_cards) for h in live}
            went_to_showdown = True

        by_id = self.players_by_id
        for award in awards:
            for pid, share in award.shares.items():
                by_id[pid].stack += share
                if share:
                    self._transaction(pid, share, credit=True)
            self.context.append(self._describe_award(award))

        for hand in self.hands:
            if not hand.placeholder:
                self._write(
                    HandRecord(
                        id=f"{self.round_id}:{hand.player_id}",
                        round_id=self.round_id,
                        player_id=hand.player_id,
                        seat=hand.seat,
                        hole_cards=[str(c) for c in hand.hole_cards],
                        committed=hand.committed,
                        folded=hand.folded,
                        all_in=hand.all_in,
                    )
                )

        if self.on_showdown:
            self.on_showdown(awards)

        deltas = {pid: by_id[pid].stack - start for pid, start in stacks_before.items()}
        logger.info(
            "Hand %d settled: pot %d, winners %s",
            self.hand_number, self.ledger.total, ", ".join(w for a in awards for w in a.winners) or "none",
        )
        return HandResult(
            round_id=self.round_id,
            hand_number=self.hand_number,
            seats=seats,
            community=list(self.community),
            pots=pots,
            awards=awards,
            deltas=deltas,
            went_to_showdown=went_to_showdown,
            actions=list(self.actions),
            context=list(self.context),
            shown=shown,
            street_totals=dict(self.street_totals),
        )

    @staticmethod
    def _describe_award(award: PotAward) -> str:
        names = " and ".join(award.winners)
        if award.value is not None:
            return f"{names} won {award.pot.amount} with {award.value.describe()}"
        return f"{names} won {award.pot.amount}"

    def _check_chips(self, expected: int, settled: bool = False) -> None:
        stacks = sum(p.stack for p in self.players if not p.is_empty)
        in_pot = 0 if settled else self.ledger.total
        committed = sum(h.committed for h in self.hands)
        if stacks + in_pot != expected or (not settled and committed != self.ledger.total):
            raise InvariantViolation(
                "chip conservation failed",
                self.dump(expected=expected, stacks=stacks, in_pot=in_pot, committed=committed),
            )

    def dump(self, **extra: object) -> dict[str, object]:
        """Snapshot of the hand for diagnosing an invariant failure."""
        return {
            "game_id": self.game_id,
            "round_id": self.round_id,
            "hand_number": self.hand_number,
            "state": self.state.value,
            "button": self.button,
            "community": [str(c) for c in self.community],
            "stacks": {p.id: p.stack for p in self.players},
            "hands": [
                {
                    "player_id": h.player_id,
                    "amount": h.amount,
                    "committed": h.committed,
                    "folded": h.folded,
                    "all_in": h.all_in,
                }
                for h in self.hands
            ],
            "contributions": self.ledger.contributions,
            **extra,
        }

    # -- side effects ------------------------------------------------------

    def _transaction(self, player_id: str, amount: int, credit: bool) -> None:
        self._write(
            TransactionRecord(
                id=new_id(),
                game_id=self.game_id,
                round_id=self.round_id,
                player_id=player_id,
                amount=amount,
                credit=credit,
            )
        )

    def _write(self, record: Record) -> None:
        if self.records is not None:
            self.records.write(record)

    async def _observe(self, result: HandResult) -> None:
        """Let providers that implement ``observe`` update their player's notes."""
        by_id = self.players_by_id
        pending: list[tuple[Player, asyncio.Future[str | None]]] = []
        for pid, provider in self.providers.items():
            player = by_id.get(pid)
            if player is None or player.is_empty or not isinstance(provider, Observer):
                continue
            summary = RoundSummary(
                game_id=self.game_id,
                hand_number=self.hand_number,
                player_id=pid,
                notes=player.notes,
                community=list(result.community),
                context=list(result.context),
                deltas=dict(result.deltas),
                shown={k: list(v) for k, v in result.shown.items()},
            )
            pending.append(
                (player, asyncio.ensure_future(asyncio.wait_for(provider.observe(summary), self.observe_timeout)))
            )
        if not pending:
            return

        outcomes = await asyncio.gather(*(f for _, f in pending), return_exceptions=True)
        for (player, _), outcome in zip(pending, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("Observation for %s failed: %r", player.id, outcome)
            elif outcome is not None:
                player.notes = str(outcome)
