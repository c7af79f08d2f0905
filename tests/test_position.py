"""Tests for seat resolution and position labels."""

import pytest
from pokerarena.errors import InvariantViolation
from pokerarena.player import Player
from pokerarena.position import Position, button_distance, classify, position_label
from pokerarena.seating import SeatTable, next_button_position, next_non_empty_seat


def _table(layout: str) -> list[Player]:
    """'x' is an agent seat, '.' an empty one."""
    players = []
    for seat, mark in enumerate(layout):
        if mark == ".":
            players.append(Player.empty(seat))
        else:
            players.append(Player(id=f"P{seat}", label=f"P{seat}", seat=seat, stack=1000))
    return players


class TestNextNonEmptySeat:
    def test_skips_empty(self):
        players = _table("x..x")
        assert next_non_empty_seat(players, 1, 4) == 3

    def test_wraps(self):
        players = _table("x..x")
        assert next_non_empty_seat(players, 4, 4) == 0

    def test_start_is_occupied(self):
        assert next_non_empty_seat(_table("xx"), 1, 2) == 1

    def test_all_empty_returns_start(self):
        assert next_non_empty_seat(_table("..."), 1, 3) == 1

    def test_sitting_out_is_skipped(self):
        players = _table("xxx")
        players[1].sitting_out = True
        assert next_non_empty_seat(players, 1, 3) == 2

    def test_next_button(self):
        players = _table("x.x.x")
        assert next_button_position(players, 0, 5) == 2
        assert next_button_position(players, 4, 5) == 0


class TestSeatTable:
    def test_six_handed(self):
        seats = SeatTable.resolve(_table("xxxxxx"), 0)
        assert (seats.button, seats.small_blind, seats.big_blind) == (0, 1, 2)
        assert seats.preflop_start == 3
        assert seats.postflop_start == 1

    def test_heads_up(self):
        seats = SeatTable.resolve(_table("xx"), 1)
        assert (seats.button, seats.small_blind, seats.big_blind) == (1, 0, 1)
        assert seats.preflop_start == 0

    def test_roles_skip_empty_seats(self):
        seats = SeatTable.resolve(_table("x.x.xx"), 0)
        assert (seats.button, seats.small_blind, seats.big_blind) == (0, 2, 4)
        assert seats.preflop_start == 5
        assert seats.occupied == (0, 2, 4, 5)

    def test_button_on_empty_seat_moves_forward(self):
        seats = SeatTable.resolve(_table("x.xx"), 1)
        assert seats.button == 2

    def test_roles_are_occupied(self):
        players = _table(".x..x.x.")
        for button in range(len(players)):
            seats = SeatTable.resolve(players, button)
            for seat in (seats.button, seats.small_blind, seats.big_blind, seats.preflop_start):
                assert players[seat].is_occupied

    def test_fewer_than_two_players(self):
        with pytest.raises(InvariantViolation):
            SeatTable.resolve(_table("x..."), 0)


class TestPositionLabels:
    def test_six_handed_labels(self):
        seats = SeatTable.resolve(_table("xxxxxx"), 0)
        labels = [seats.label(s) for s in range(6)]
        assert labels == [
            "Button (Dealer)",
            "Small Blind",
            "Big Blind",
            "Under the Gun (UTG)",
            "UTG+1",
            "Cutoff",
        ]

    def test_nine_handed_middle_positions(self):
        seats = SeatTable.resolve(_table("xxxxxxxxx"), 0)
        assert seats.label(5) == "Middle Position (MP3)"
        assert seats.label(7) == "Middle Position (MP5)"
        assert seats.label(8) == "Cutoff"

    def test_labels_ignore_empty_seats(self):
        # Occupied: 0, 2, 3, 5 -> button, SB, BB, then seat 5 is UTG
        seats = SeatTable.resolve(_table("x.xx.x"), 0)
        assert seats.label(5) == "Under the Gun (UTG)"

    def test_heads_up_blinds_win_over_button(self):
        seats = SeatTable.resolve(_table("xx"), 1)
        assert seats.label(1) == "Big Blind"
        assert seats.label(0) == "Small Blind"

    def test_classify_returns_distance(self):
        position, distance = classify(3, button=0, small_blind=1, big_blind=2, occupied=[0, 1, 2, 3, 4])
        assert position == Position.UTG
        assert distance == 3

    def test_button_distance_requires_occupied(self):
        with pytest.raises(ValueError):
            button_distance(1, 0, [0, 2])

    def test_position_label_function(self):
        label = position_label(4, button=0, small_blind=1, big_blind=2, occupied=[0, 1, 2, 3, 4])
        assert label == "Cutoff"

    def test_short_names(self):
        assert Position.BUTTON.short == "BTN"
        assert Position.BIG_BLIND.is_blind
        assert not Position.CUTOFF.is_blind
