"""Seat order resolution: button, blinds and first-to-act, skipping empty seats."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .errors import InvariantViolation
from .player import Player
from .position import position_label


def next_non_empty_seat(players: Sequence[Player], start: int, seat_count: int) -> int:
    """First occupied seat at or after ``start``, wrapping around the table.

    Returns ``start`` itself when every seat is empty; callers must treat that
    as a configuration failure.
    """
    position = start % seat_count
    for _ in range(seat_count):
        if players[position].is_occupied:
            return position
        position = (position + 1) % seat_count
    return start


def next_button_position(players: Sequence[Player], button: int, seat_count: int) -> int:
    """Where the button moves after a hand."""
    return next_non_empty_seat(players, (button + 1) % seat_count, seat_count)


def occupied_seats(players: Sequence[Player]) -> list[int]:
    return [p.seat for p in players if p.is_occupied]


@dataclass(frozen=True)
class SeatTable:
    """Seat roles for one hand."""

    seat_count: int
    button: int
    small_blind: int
    big_blind: int
    preflop_start: int
    occupied: tuple[int, ...]

    @property
    def postflop_start(self) -> int:
        return self.small_blind

    @classmethod
    def resolve(cls, players: Sequence[Player], button: int) -> SeatTable:
        """Compute the roles for a hand with the button at (or after) ``button``.

        Raises InvariantViolation if fewer than two seats are occupied or any
        role lands on an unoccupied seat.
        """
        seat_count = len(players)
        occupied = tuple(occupied_seats(players))
        if len(occupied) < 2:
            raise InvariantViolation(
                f"need two occupied seats to deal, found {len(occupied)}",
                {"occupied": list(occupied), "button": button},
            )

        button = next_non_empty_seat(players, button, seat_count)
        small_blind = next_non_empty_seat(players, button + 1, seat_count)
        big_blind = next_non_empty_seat(players, small_blind + 1, seat_count)
        preflop_start = next_non_empty_seat(players, big_blind + 1, seat_count)

        table = cls(
            seat_count=seat_count,
            button=button,
            small_blind=small_blind,
            big_blind=big_blind,
            preflop_start=preflop_start,
            occupied=occupied,
        )
        for role, seat in (("button", button), ("small blind", small_blind), ("big blind", big_blind)):
            if not players[seat].is_occupied:
                raise InvariantViolation(
                    f"{role} resolved to unoccupied seat {seat}", table.as_dict()
                )
        return table

    def label(self, seat: int) -> str:
        return position_label(
            seat,
            button=self.button,
            small_blind=self.small_blind,
            big_blind=self.big_blind,
            occupied=self.occupied,
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "button": self.button,
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
            "preflop_start": self.preflop_start,
            "occupied": list(self.occupied),
        }
