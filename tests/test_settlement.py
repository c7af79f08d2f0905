"""Tests for settlement events and their delivery."""

import asyncio
import json
import logging

import httpx
import pytest
from pokerarena.settlement import (
    HttpSettlementNotifier,
    LoggingNotifier,
    Loss,
    SettlementBridge,
    SettlementEvent,
    Win,
)


class TestSettlementEvent:
    def test_from_stacks(self):
        event = SettlementEvent.from_stacks(
            "game-1",
            before={"A": 2000, "B": 2000, "C": 2000},
            after={"A": 1950, "B": 2050, "C": 2000},
        )
        assert event.losers == [Loss("A", 50)]
        assert event.winners == [Win("B", 50)]
        assert not event.is_empty

    def test_unchanged_stacks_are_empty(self):
        event = SettlementEvent.from_stacks("game-1", {"A": 100}, {"A": 100})
        assert event.is_empty

    def test_payload(self):
        event = SettlementEvent("game-1", [Loss("A", 300)], [Win("B", 200), Win("C", 100)])
        assert event.payload() == {
            "losers": [{"playerId": "A", "chipsLost": 300}],
            "winners": [{"playerId": "B", "chipsWon": 200}, {"playerId": "C", "chipsWon": 100}],
            "gameId": "game-1",
        }


class TestHttpSettlementNotifier:
    def test_posts_payload(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        async def go():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                notifier = HttpSettlementNotifier("http://payments.test/settle", client=client)
                await notifier.notify([Loss("A", 50)], [Win("B", 50)], "game-1")

        asyncio.run(go())

        assert len(seen) == 1
        assert seen[0].method == "POST"
        assert str(seen[0].url) == "http://payments.test/settle"
        assert json.loads(seen[0].content) == {
            "losers": [{"playerId": "A", "chipsLost": 50}],
            "winners": [{"playerId": "B", "chipsWon": 50}],
            "gameId": "game-1",
        }

    def test_error_status_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))

        async def go():
            async with httpx.AsyncClient(transport=transport) as client:
                notifier = HttpSettlementNotifier("http://payments.test/settle", client=client)
                await notifier.notify([Loss("A", 50)], [Win("B", 50)], "game-1")

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(go())


class FailingNotifier:
    def __init__(self):
        self.calls = 0

    async def notify(self, losers, winners, game_id):
        self.calls += 1
        raise ConnectionError("payments down")


class TestSettlementBridge:
    def _deliver(self, notifier, *events):
        async def go():
            bridge = SettlementBridge(notifier)
            bridge.start()
            for event in events:
                bridge.emit(event)
            await bridge.close()
            return bridge

        return asyncio.run(go())

    def test_delivers_events(self):
        notifier = LoggingNotifier()
        event = SettlementEvent("game-1", [Loss("A", 50)], [Win("B", 50)])
        self._deliver(notifier, event)
        assert notifier.events == [event]

    def test_skips_empty_events(self):
        notifier = LoggingNotifier()
        self._deliver(notifier, SettlementEvent("game-1"))
        assert notifier.events == []

    def test_failure_is_logged_not_raised(self, caplog):
        notifier = FailingNotifier()
        event = SettlementEvent("game-1", [Loss("A", 50)], [Win("B", 50)])
        with caplog.at_level(logging.WARNING):
            bridge = self._deliver(notifier, event)

        assert notifier.calls == 1
        assert bridge.dispatcher.failed == 1
        assert "payments down" in caplog.text

    def test_logging_notifier_logs(self, caplog):
        notifier = LoggingNotifier()
        with caplog.at_level(logging.INFO, logger="pokerarena.settlement"):
            asyncio.run(notifier.notify([Loss("A", 50)], [Win("B", 50)], "game-1"))
        assert "game-1" in caplog.text
