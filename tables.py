import os
from dataclasses import dataclass
from typing import Iterable, List, Optional

from errors import CapacityError

# Параметры стола
MAX_PLAYERS = 5
INITIAL_STACK = 1000
MIN_PLAYERS = 2
NAME_MAX_LEN = 16
CHAT_MAX_LEN = 120
STACK_ADJUST_LIMIT = 500

DECK_SIZE = 52
# сжигаемые карты: флоп, тёрн, ривер
BURNS_PER_HAND = 3
BOARD_SIZE = 5


@dataclass(frozen=True)
class TableConfig:
    capacity: int = MAX_PLAYERS
    starting_stack: int = INITIAL_STACK

    def __post_init__(self):
        if self.capacity < MIN_PLAYERS:
            raise ValueError(f"capacity must be at least {MIN_PLAYERS}")
        if 2 * self.capacity + BOARD_SIZE + BURNS_PER_HAND > DECK_SIZE:
            raise ValueError(f"capacity {self.capacity} does not fit in one deck")
        if self.starting_stack < 0:
            raise ValueError("starting_stack must be non-negative")

    @classmethod
    def from_env(cls) -> "TableConfig":
        """Reads TABLE_CAPACITY / STARTING_STACK, falling back to the defaults."""
        return cls(
            capacity=int(os.getenv("TABLE_CAPACITY", MAX_PLAYERS)),
            starting_stack=int(os.getenv("STARTING_STACK", INITIAL_STACK)),
        )


def allocate_seat(occupied: Iterable[int], capacity: int = MAX_PLAYERS) -> int:
    """Возвращает наименьший свободный номер места или бросает CapacityError."""
    used = set(occupied)
    for seat in range(capacity):
        if seat not in used:
            return seat
    raise CapacityError("table is full")


def next_dealer_seat(seats: Iterable[int], current: Optional[int]) -> int:
    """
    Следующее занятое место по кругу после `current`.
    Без текущего дилера — самое младшее место.
    """
    ordered = sorted(seats)
    if not ordered:
        raise ValueError("no occupied seats")
    if current is None or current not in ordered:
        return ordered[0]
    idx = ordered.index(current)
    return ordered[(idx + 1) % len(ordered)]


def _mark_dealer(players: List, seat: int) -> None:
    for p in players:
        p.is_dealer = p.seat == seat


def rotate_dealer(players: List) -> int:
    """Явная передача кнопки: следующее место по кругу."""
    current = next((p.seat for p in players if p.is_dealer), None)
    seat = next_dealer_seat((p.seat for p in players), current)
    _mark_dealer(players, seat)
    return seat


def reassign_dealer_after_leave(players: List) -> Optional[int]:
    """
    Дилер ушёл: кнопка достаётся самому младшему оставшемуся месту,
    а не следующему по кругу.
    """
    if not players:
        return None
    seat = min(p.seat for p in players)
    _mark_dealer(players, seat)
    return seat
