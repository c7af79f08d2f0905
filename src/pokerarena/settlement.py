"""Settlement events: who lost and who won chips in a hand."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from .dispatch import BackgroundDispatcher
from .ports import SettlementNotifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Loss:
    player_id: str
    chips_lost: int


@dataclass(frozen=True)
class Win:
    player_id: str
    chips_won: int


@dataclass(frozen=True)
class SettlementEvent:
    """Net chip movement of one resolved hand."""

    game_id: str
    losers: list[Loss] = field(default_factory=list)
    winners: list[Win] = field(default_factory=list)

    @classmethod
    def from_stacks(
        cls,
        game_id: str,
        before: Mapping[str, int],
        after: Mapping[str, int],
    ) -> SettlementEvent:
        """Build the event from stacks before and after the hand.

        Players whose stack did not change appear in neither list.
        """
        losers: list[Loss] = []
        winners: list[Win] = []
        for pid, start in before.items():
            delta = after.get(pid, start) - start
            if delta < 0:
                losers.append(Loss(pid, -delta))
            elif delta > 0:
                winners.append(Win(pid, delta))
        return cls(game_id=game_id, losers=losers, winners=winners)

    @property
    def is_empty(self) -> bool:
        return not self.losers and not self.winners

    def payload(self) -> dict[str, Any]:
        """JSON body in the shape the payment endpoint expects."""
        return {
            "losers": [{"playerId": loss.player_id, "chipsLost": loss.chips_lost} for loss in self.losers],
            "winners": [{"playerId": w.player_id, "chipsWon": w.chips_won} for w in self.winners],
            "gameId": self.game_id,
        }


class LoggingNotifier:
    """Writes settlements to the log. The default when no endpoint is set."""

    def __init__(self) -> None:
        self.events: list[SettlementEvent] = []

    async def notify(self, losers: list[Loss], winners: list[Win], game_id: str) -> None:
        event = SettlementEvent(game_id=game_id, losers=losers, winners=winners)
        self.events.append(event)
        logger.info(
            "Settlement for %s: losers=%s winners=%s",
            game_id,
            {loss.player_id: loss.chips_lost for loss in losers},
            {w.player_id: w.chips_won for w in winners},
        )


class HttpSettlementNotifier:
    """POSTs each settlement as JSON to ``url``."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client

    async def notify(self, losers: list[Loss], winners: list[Win], game_id: str) -> None:
        body = SettlementEvent(game_id=game_id, losers=losers, winners=winners).payload()
        if self._client is not None:
            response = await self._client.post(self.url, json=body)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=body)
        response.raise_for_status()
        logger.debug("Settlement for %s delivered: HTTP %d", game_id, response.status_code)


class SettlementBridge:
    """Queues settlement events for background delivery.

    Delivery is attempted once; a failure is logged and never affects the
    chips already settled at the table.
    """

    def __init__(self, notifier: SettlementNotifier) -> None:
        self.notifier = notifier
        self.dispatcher = BackgroundDispatcher("settlement", retries=0)

    def start(self) -> None:
        self.dispatcher.start()

    def emit(self, event: SettlementEvent) -> None:
        if event.is_empty:
            return

        async def job() -> None:
            await self.notifier.notify(list(event.losers), list(event.winners), event.game_id)

        self.dispatcher.submit(f"settlement:{event.game_id}", job)

    async def close(self) -> None:
        await self.dispatcher.close()
