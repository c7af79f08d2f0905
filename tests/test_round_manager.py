"""Tests for the single-hand orchestrator."""

import asyncio

import pytest
from pokerarena.action import Action, ActionType, Street
from pokerarena.card import cards
from pokerarena.config import EngineConfig
from pokerarena.deck import Deck
from pokerarena.dispatch import RecordWriter
from pokerarena.errors import InvariantViolation
from pokerarena.player import DecisionRequest, Player
from pokerarena.providers import ScriptedProvider
from pokerarena.round_manager import RoundManager, RoundState
from pokerarena.settlement import LoggingNotifier, Loss, SettlementBridge, Win
from pokerarena.storage import InMemoryStore

ENGINE = EngineConfig(turn_delay=0, decision_timeout=1.0)


def _players(*stacks: int, empty: tuple[int, ...] = ()) -> list[Player]:
    players = []
    for seat, stack in enumerate(stacks):
        if seat in empty:
            players.append(Player.empty(seat))
        else:
            pid = "ABCDEFGHIJ"[seat]
            players.append(Player(id=pid, label=f"Player {pid}", seat=seat, stack=stack))
    return players


def _manager(players, scripts=None, deck=None, button=0, **kwargs) -> RoundManager:
    scripts = scripts or {}
    providers = kwargs.pop("providers", None) or {
        p.id: ScriptedProvider.of(*scripts.get(p.id, [])) for p in players if not p.is_empty
    }
    return RoundManager(
        players=players,
        providers=providers,
        deck=deck or Deck.stacked([]),
        button=button,
        engine=kwargs.pop("engine", ENGINE),
        game_id="game-1",
        **kwargs,
    )


def _play(manager: RoundManager):
    return asyncio.run(manager.play())


class TestFoldOut:
    def test_heads_up_fold(self):
        """A posts the small blind and folds; B wins the blinds."""
        players = _players(2000, 2000)
        manager = _manager(players, {"A": [Action.fold()]}, button=1)
        result = _play(manager)

        assert [p.stack for p in players] == [1950, 2050]
        assert result.deltas == {"A": -50, "B": 50}
        assert result.winners == ["B"]
        assert not result.went_to_showdown
        assert manager.state == RoundState.SETTLEMENT

    def test_fold_out_reveals_nothing(self):
        players = _players(2000, 2000)
        result = _play(_manager(players, {"A": [Action.fold()]}, button=1))

        assert result.community == []
        assert result.shown == {}
        assert not any("flop" in line for line in result.context)
        assert result.awards[0].value is None
        assert result.street_totals == {Street.PREFLOP: 150}

    def test_context_log(self):
        players = _players(2000, 2000)
        result = _play(_manager(players, {"A": [Action.fold()]}, button=1))
        assert result.context == [
            "A posted the small blind",
            "B posted the big blind",
            "A folded",
            "B won 150",
        ]

    def test_blind_records(self):
        players = _players(2000, 2000)
        result = _play(_manager(players, {"A": [Action.fold()]}, button=1))
        blinds = [r for r in result.actions if r.blind]
        assert [(r.player_id, r.amount, r.reasoning) for r in blinds] == [
            ("A", 50, "Posted the small blind"),
            ("B", 100, "Posted the big blind"),
        ]


class TestShowdown:
    def test_check_down_to_showdown(self):
        deck = Deck.stacked(cards("As Ad Ks Kd 2h 5c 9s Jd 3h"))
        players = _players(2000, 2000)
        result = _play(_manager(players, deck=deck, button=0))

        assert result.went_to_showdown
        assert result.community == cards("2h 5c 9s Jd 3h")
        assert result.shown == {"A": cards("As Ad"), "B": cards("Ks Kd")}
        assert [p.stack for p in players] == [2100, 1900]
        assert "The flop cards are 2h 5c 9s" in result.context
        assert "The turn card is Jd" in result.context
        assert "The river card is 3h" in result.context
        assert result.street_totals == {
            Street.PREFLOP: 200,
            Street.FLOP: 0,
            Street.TURN: 0,
            Street.RIVER: 0,
        }

    def test_split_pot_odd_chip(self):
        """Two players split 201 chips; the lower seat gets the odd chip."""
        deck = Deck.stacked(cards("2c 3c 7d 8d 2d 3d Ah Kh Qs Jc Ts"))
        players = _players(1000, 1000, 1000)
        engine = EngineConfig(small_blind=1, big_blind=100, turn_delay=0)
        result = _play(_manager(players, {"B": [Action.fold()]}, deck=deck, engine=engine))

        assert result.awards[0].shares == {"A": 101, "C": 100}
        assert [p.stack for p in players] == [1001, 999, 1000]

    def test_all_in_runs_out_the_board(self):
        deck = Deck.stacked(cards("As Ad Ks Kd 2h 5c 9s Jd 3h"))
        players = _players(500, 2000)
        manager = _manager(players, {"A": [Action.bet(400)]}, deck=deck, button=0)
        result = _play(manager)

        assert len(result.community) == 5
        assert {r.street for r in result.actions} == {Street.PREFLOP}
        # Board run out without betting still closes each street
        assert result.street_totals == {Street.PREFLOP: 1000, Street.FLOP: 0, Street.TURN: 0, Street.RIVER: 0}
        assert [p.stack for p in players] == [1000, 1500]

    def test_three_way_side_pot(self):
        """A all-in for 300 preflop, B and C bet 400 more on the flop: 900 main pot, 800 side pot."""
        deck = Deck.stacked(cards("As Ad Ks Kd Qs Qd 2h 5c 9s Jd 3h"))
        players = _players(300, 1000, 1000)
        scripts = {"A": [Action.bet(300)], "B": [Action.bet(250), Action.bet(400)]}
        result = _play(_manager(players, scripts, deck=deck, button=0))

        assert [p.amount for p in result.pots] == [900, 800]
        assert result.pots[0].eligible == ("A", "B", "C")
        assert result.pots[1].eligible == ("B", "C")
        assert result.awards[0].shares == {"A": 900}
        assert result.awards[1].shares == {"B": 800}
        assert [p.stack for p in players] == [900, 1100, 300]

    def test_chip_conservation(self):
        players = _players(1500, 800, 2500, 1200)
        scripts = {
            "D": [Action.bet(300)],
            "A": [Action.bet(1500)],
            "B": [Action.bet(800)],
            "C": [Action.fold()],
        }
        before = sum(p.stack for p in players)
        result = _play(_manager(players, scripts, deck=Deck.shuffled(), button=0))

        assert sum(p.stack for p in players) == before
        assert sum(result.deltas.values()) == 0
        assert result.pot_total == sum(a for award in result.awards for a in award.shares.values())


class TestEmptySeats:
    def test_empty_seat_is_skipped(self):
        players = _players(2000, 0, 2000, 2000, empty=(1,))
        manager = _manager(players, button=0)
        result = _play(manager)

        empty = manager.hands[1]
        assert empty.hole_cards == []
        assert empty.placeholder and empty.folded
        assert all(r.player_id != players[1].id for r in result.actions)
        assert result.seats.small_blind == 2
        assert result.seats.big_blind == 3
        assert players[1].stack == 0

    def test_button_on_empty_seat(self):
        players = _players(2000, 0, 2000, empty=(1,))
        manager = _manager(players, button=1)
        result = _play(manager)
        assert result.seats.button == 2
        assert result.seats.small_blind == 0


class TestInvariants:
    def test_conservation_failure_raises(self):
        players = _players(2000, 2000)

        def leak(record):
            if not record.blind:
                players[0].stack += 10

        manager = _manager(players, {"A": [Action.fold()]}, button=1, on_action=leak)
        with pytest.raises(InvariantViolation) as exc:
            _play(manager)
        assert exc.value.state["round_id"] == manager.round_id
        assert "stacks" in exc.value.state


class TestSideEffects:
    def test_records_and_settlement(self):
        store = InMemoryStore()
        notifier = LoggingNotifier()
        players = _players(2000, 2000)

        async def go():
            records = RecordWriter(store)
            bridge = SettlementBridge(notifier)
            records.start()
            bridge.start()
            manager = _manager(players, {"A": [Action.fold()]}, button=1, records=records, settlement=bridge)
            result = await manager.play()
            await records.close()
            await bridge.close()
            return manager, result

        manager, result = asyncio.run(go())

        round_record = asyncio.run(store.get("round", manager.round_id))
        assert round_record is not None
        assert round_record.deltas == {"A": -50, "B": 50}
        assert len(store.all("action")) == 3
        assert len(store.all("hand")) == 2
        transactions = store.all("transaction")
        assert sum(t.amount for t in transactions if not t.credit) == 150
        assert sum(t.amount for t in transactions if t.credit) == 150

        assert len(notifier.events) == 1
        assert notifier.events[0].losers == [Loss("A", 50)]
        assert notifier.events[0].winners == [Win("B", 50)]

    def test_observe_updates_notes(self):
        class Reflective(ScriptedProvider):
            async def observe(self, summary):
                return f"hand {summary.hand_number}: net {summary.net}"

        class Failing(ScriptedProvider):
            async def observe(self, summary):
                raise RuntimeError("no thoughts")

        players = _players(2000, 2000)
        players[1].notes = "old notes"
        providers = {"A": Reflective.of(Action.fold()), "B": Failing()}
        _play(_manager(players, providers=providers, button=1))

        assert players[0].notes == "hand 1: net -50"
        assert players[1].notes == "old notes"

    def test_requests_carry_position_and_notes(self):
        class Recorder:
            def __init__(self):
                self.requests: list[DecisionRequest] = []

            async def decide(self, request):
                self.requests.append(request)
                return Action.fold()

        recorder = Recorder()
        players = _players(2000, 2000, 2000)
        players[0].notes = "careful"
        providers = {"A": recorder, "B": ScriptedProvider(), "C": ScriptedProvider()}
        result = _play(_manager(players, providers=providers, button=0))

        request = recorder.requests[0]
        assert request.position == "Button (Dealer)"
        assert request.notes == "careful"
        assert request.bet_to_call == 100
        assert len(request.hole_cards) == 2
        assert result.actions[2].type == ActionType.FOLD
