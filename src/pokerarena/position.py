"""Seat-relative position names shown to decision providers."""

from enum import Enum
from typing import Sequence


class Position(Enum):
    """Table positions, named relative to the button.

    Only occupied seats count when measuring the distance from the button,
    so an empty seat never shifts who is "under the gun".
    """

    BUTTON = "Button (Dealer)"
    SMALL_BLIND = "Small Blind"
    BIG_BLIND = "Big Blind"
    UTG = "Under the Gun (UTG)"
    UTG_1 = "UTG+1"
    MIDDLE = "Middle Position"
    CUTOFF = "Cutoff"

    @property
    def short(self) -> str:
        return {
            Position.BUTTON: "BTN",
            Position.SMALL_BLIND: "SB",
            Position.BIG_BLIND: "BB",
            Position.UTG: "UTG",
            Position.UTG_1: "UTG+1",
            Position.MIDDLE: "MP",
            Position.CUTOFF: "CO",
        }[self]

    @property
    def is_blind(self) -> bool:
        return self in (Position.SMALL_BLIND, Position.BIG_BLIND)


def button_distance(seat: int, button: int, occupied: Sequence[int]) -> int:
    """How many occupied seats ``seat`` sits after the button."""
    order = sorted(occupied)
    if seat not in order or button not in order:
        raise ValueError(f"seat {seat} and button {button} must both be occupied")
    return (order.index(seat) - order.index(button)) % len(order)


def classify(
    seat: int,
    *,
    button: int,
    small_blind: int,
    big_blind: int,
    occupied: Sequence[int],
) -> tuple[Position, int]:
    """Return the position of ``seat`` and its distance from the button.

    Blind roles win over the button, which matters heads-up where the button
    also posts the big blind.
    """
    distance = button_distance(seat, button, occupied)
    total = len(occupied)

    if seat == small_blind:
        return Position.SMALL_BLIND, distance
    if seat == big_blind:
        return Position.BIG_BLIND, distance
    if distance == 0:
        return Position.BUTTON, distance
    if distance == 3:
        return Position.UTG, distance
    if distance == 4 and total >= 6:
        return Position.UTG_1, distance
    if distance == total - 1:
        return Position.CUTOFF, distance
    return Position.MIDDLE, distance


def position_label(
    seat: int,
    *,
    button: int,
    small_blind: int,
    big_blind: int,
    occupied: Sequence[int],
) -> str:
    """Human-readable position, e.g. 'Cutoff' or 'Middle Position (MP3)'."""
    position, distance = classify(
        seat,
        button=button,
        small_blind=small_blind,
        big_blind=big_blind,
        occupied=occupied,
    )
    if position == Position.MIDDLE:
        return f"{position.value} (MP{distance - 2})"
    return position.value
