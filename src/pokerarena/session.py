"""Game loop - seats the players, plays the configured hands, rotates the button."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Sequence

from .action import ActionRecord, Street
from .card import Card
from .config import BustPolicy, GameConfig
from .deck import Deck
from .dispatch import RecordWriter
from .errors import InvariantViolation
from .player import Player
from .ports import DecisionProvider, PersistenceStore, SettlementNotifier
from .providers import load_provider
from .round_manager import HandResult, RoundManager
from .seating import next_button_position, next_non_empty_seat
from .settlement import LoggingNotifier, SettlementBridge
from .showdown import PotAward, ShowdownEvaluator
from .storage import GameRecord, new_id

logger = logging.getLogger(__name__)


def seat_players(config: GameConfig) -> list[Player]:
    """One Player per seat, empty seats included, all with the starting stack."""
    players: list[Player] = []
    for seat, spec in enumerate(config.seats):
        if spec.is_empty:
            players.append(Player.empty(seat, spec.id_for(seat)))
            continue
        players.append(
            Player(
                id=spec.id_for(seat),
                label=spec.label or f"Player {seat + 1}",
                seat=seat,
                stack=config.starting_stack,
                agent=spec.agent,
            )
        )
    return players


@dataclass
class GameSession:
    """Plays ``config.hands`` hands at one table.

    ``providers`` maps player ids to decision providers; seats without an
    entry get one loaded from their agent reference.
    """

    config: GameConfig
    providers: dict[str, DecisionProvider] = field(default_factory=dict)
    store: PersistenceStore | None = None
    notifier: SettlementNotifier | None = None
    game_id: str = field(default_factory=new_id)
    deck_factory: Callable[[random.Random], Deck] = Deck.shuffled
    evaluator: ShowdownEvaluator = field(default_factory=ShowdownEvaluator)

    # Callbacks
    on_hand_start: Callable[[int, int], None] | None = None
    on_hand_end: Callable[[HandResult], None] | None = None
    on_action: Callable[[ActionRecord], None] | None = None
    on_deal: Callable[[Street, list[Card]], None] | None = None
    on_showdown: Callable[[list[PotAward]], None] | None = None
    on_bust: Callable[[Player], None] | None = None

    players: list[Player] = field(init=False)
    button: int = field(init=False)
    hand_number: int = 0
    results: list[HandResult] = field(default_factory=list)
    review_required: bool = False
    review_reason: str | None = None

    def __post_init__(self) -> None:
        self.config.validate()
        self.players = seat_players(self.config)
        for player in self.players:
            if player.is_empty or player.id in self.providers:
                continue
            spec = self.config.seats[player.seat]
            self.providers[player.id] = load_provider(spec.agent, **spec.options)
        self.button = next_non_empty_seat(self.players, 0, len(self.players))
        self._rng = random.Random(self.config.seed)
        self._records = RecordWriter(self.store) if self.store is not None else None
        self._settlement = SettlementBridge(self.notifier or LoggingNotifier())

    @property
    def stacks(self) -> dict[str, int]:
        return {p.id: p.stack for p in self.players if not p.is_empty}

    @property
    def active_players(self) -> list[Player]:
        return [p for p in self.players if p.is_occupied]

    @property
    def finished(self) -> bool:
        return (
            self.review_required
            or self.hand_number >= self.config.hands
            or len(self.active_players) < 2
        )

    async def run(self) -> list[HandResult]:
        """Play every hand, stopping early on a review flag or too few players."""
        self._start()
        self._write_game("active")
        try:
            while not self.finished:
                if await self.play_hand() is None:
                    break
        finally:
            status = "review_required" if self.review_required else "completed"
            self._write_game(status)
            await self._stop()
        logger.info("Game %s %s after %d hand(s): %s", self.game_id, status, self.hand_number, self.stacks)
        return self.results

    async def play_hand(self) -> HandResult | None:
        """Play the next hand. Returns None if it had to be aborted."""
        self._apply_bust_policy()
        if len(self.active_players) < 2:
            logger.info("Game %s: fewer than two players can play", self.game_id)
            return None

        self.hand_number += 1
        self.button = next_non_empty_seat(self.players, self.button, len(self.players))
        if self.on_hand_start:
            self.on_hand_start(self.hand_number, self.button)

        manager = RoundManager(
            players=self.players,
            providers=self.providers,
            deck=self.deck_factory(self._rng),
            button=self.button,
            engine=self.config.engine,
            game_id=self.game_id,
            hand_number=self.hand_number,
            evaluator=self.evaluator,
            records=self._records,
            settlement=self._settlement,
            on_action=self.on_action,
            on_deal=self.on_deal,
            on_showdown=self.on_showdown,
        )
        snapshot = {p.id: p.stack for p in self.players}
        try:
            result = await manager.play()
        except InvariantViolation as exc:
            logger.error(
                "Hand %d of %s aborted: %s; state: %s",
                self.hand_number, self.game_id, exc, exc.state or manager.dump(),
            )
            for player in self.players:
                player.stack = snapshot[player.id]
            self.review_required = True
            self.review_reason = str(exc)
            return None

        self.results.append(result)
        if self.on_hand_end:
            self.on_hand_end(result)
        self.button = next_button_position(self.players, self.button, len(self.players))
        return result

    def _apply_bust_policy(self) -> None:
        for player in self.players:
            if not player.is_busted or player.sitting_out:
                continue
            if self.on_bust:
                self.on_bust(player)
            if self.config.bust_policy == BustPolicy.RESET:
                logger.info("%s busted; topping up to %d", player.id, self.config.starting_stack)
                player.stack = self.config.starting_stack
            else:
                logger.info("%s busted and sits out", player.id)
                player.sitting_out = True

    def _start(self) -> None:
        if self._records is not None:
            self._records.start()
        self._settlement.start()

    async def _stop(self) -> None:
        if self._records is not None:
            await self._records.close()
        await self._settlement.close()

    def _write_game(self, status: str) -> None:
        if self._records is None:
            return
        self._records.write(
            GameRecord(
                id=self.game_id,
                status=status,
                button=self.button,
                hands_planned=self.config.hands,
                hands_played=self.hand_number,
                seats=[
                    {"seat": p.seat, "id": p.id, "label": p.label, "agent": p.agent, "stack": p.stack}
                    for p in self.players
                ],
                review_reason=self.review_reason,
            )
        )


async def play_sessions(sessions: Sequence[GameSession]) -> list[list[HandResult]]:
    """Run independent sessions concurrently."""
    return list(await asyncio.gather(*(s.run() for s in sessions)))
