import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Dict, List, Optional

from errors import CapacityError, PreconditionError, ValidationError
from tables import (
    CHAT_MAX_LEN,
    MIN_PLAYERS,
    NAME_MAX_LEN,
    STACK_ADJUST_LIMIT,
    TableConfig,
    allocate_seat,
    reassign_dealer_after_leave,
    rotate_dealer,
)

logger = logging.getLogger(__name__)

RANKS = "23456789TJQKA"
SUITS = "cdhs"

ANONYMOUS = "anonymous"


# ---------- Колода ----------
def fresh_deck() -> List[str]:
    return [r + s for s in SUITS for r in RANKS]


def shuffled_deck(rng: Optional[random.Random] = None) -> List[str]:
    deck = fresh_deck()
    (rng or random).shuffle(deck)
    return deck


class CardSource:
    """Колода одной раздачи. Карты снимаются с конца списка."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._cards = shuffled_deck(rng)

    @property
    def remaining(self) -> int:
        return len(self._cards)

    def draw(self) -> str:
        if not self._cards:
            raise RuntimeError("card source exhausted")
        return self._cards.pop()

    def deal(self, n: int) -> List[str]:
        return [self.draw() for _ in range(n)]

    def burn(self) -> None:
        self.draw()


# ---------- Состояние стола ----------
class Phase(str, Enum):
    IDLE = "idle"
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"


class TableStatus(str, Enum):
    EMPTY = "empty"
    WAITING = "waiting"
    HAND_IN_PROGRESS = "hand_in_progress"


# street -> (required phase, next phase, cards dealt to the board)
STREETS = {
    "flop": (Phase.PREFLOP, Phase.FLOP, 3),
    "turn": (Phase.FLOP, Phase.TURN, 1),
    "river": (Phase.TURN, Phase.RIVER, 1),
}


@dataclass
class Participant:
    id: str
    name: str
    seat: int
    stack: int
    is_dealer: bool = False
    hole: List[str] = field(default_factory=list)

    def public(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "seat": self.seat,
            "stack": self.stack,
            "is_dealer": self.is_dealer,
        }


@dataclass
class Outbound:
    """One notification produced by a mutation. recipient=None means everyone."""

    event: str
    payload: Any
    recipient: Optional[str] = None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TableSession:
    """
    Authoritative in-memory state of the single table.

    Every operation either raises a TableError before touching anything, or
    mutates the state and returns the notifications to deliver, in order.
    Operations never block, so whoever serializes the calls also serializes
    the broadcasts.
    """

    def __init__(self, config: Optional[TableConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or TableConfig()
        self._rng = rng
        self.players: List[Participant] = []
        self.board: List[str] = []
        self.phase = Phase.IDLE
        self._source: Optional[CardSource] = None

    # ----- запросы -----
    @property
    def started(self) -> bool:
        return self.phase is not Phase.IDLE

    @property
    def status(self) -> TableStatus:
        if not self.players:
            return TableStatus.EMPTY
        if self.started:
            return TableStatus.HAND_IN_PROGRESS
        return TableStatus.WAITING

    def get(self, pid: str) -> Optional[Participant]:
        return next((p for p in self.players if p.id == pid), None)

    def dealer(self) -> Optional[Participant]:
        return next((p for p in self.players if p.is_dealer), None)

    def hole_cards(self, pid: str) -> List[str]:
        p = self.get(pid)
        return list(p.hole) if p else []

    def public_state(self) -> Dict[str, Any]:
        # без карманных карт, уходит всем
        return {
            "players": [p.public() for p in sorted(self.players, key=lambda p: p.seat)],
            "board": list(self.board),
            "started": self.started,
            "phase": self.phase.value,
        }

    def _state_broadcast(self) -> Outbound:
        return Outbound("state", self.public_state())

    # ----- операции -----
    def join(self, pid: str, name: Any) -> List[Outbound]:
        if not isinstance(name, str) or not name:
            raise ValidationError("name required")
        if self.get(pid) is not None:
            raise PreconditionError("already seated")
        if len(self.players) >= self.config.capacity:
            raise CapacityError("table is full")

        seat = allocate_seat((p.seat for p in self.players), self.config.capacity)
        player = Participant(
            id=pid,
            name=name[:NAME_MAX_LEN],
            seat=seat,
            stack=self.config.starting_stack,
            # первый за пустым столом становится дилером
            is_dealer=not self.players,
        )
        self.players.append(player)
        logger.info("%s joined seat %d", player.name, seat)
        return [self._state_broadcast()]

    def start_hand(self) -> List[Outbound]:
        if len(self.players) < MIN_PLAYERS:
            raise PreconditionError(f"need at least {MIN_PLAYERS} players")

        self.board = []
        self._source = CardSource(self._rng)
        self.phase = Phase.PREFLOP

        out = []
        for p in list(self.players):
            p.hole = self._source.deal(2)
            out.append(Outbound("hole", list(p.hole), recipient=p.id))
        out.append(self._state_broadcast())
        logger.info("hand started with %d players", len(self.players))
        return out

    def _deal_street(self, street: str) -> List[Outbound]:
        required, following, count = STREETS[street]
        if self.phase is not required:
            raise PreconditionError(f"cannot deal {street} in phase {self.phase.value}")
        self._source.burn()
        self.board.extend(self._source.deal(count))
        self.phase = following
        return [self._state_broadcast()]

    def deal_flop(self) -> List[Outbound]:
        return self._deal_street("flop")

    def deal_turn(self) -> List[Outbound]:
        return self._deal_street("turn")

    def deal_river(self) -> List[Outbound]:
        return self._deal_street("river")

    def rotate_dealer(self) -> List[Outbound]:
        if not self.players:
            raise PreconditionError("no players")
        rotate_dealer(self.players)
        return [self._state_broadcast()]

    def adjust_stack(self, pid: str, delta: Any) -> List[Outbound]:
        if isinstance(delta, bool) or not isinstance(delta, Real):
            raise ValidationError("delta must be a number")
        # сначала модуль: огромный int не переводится во float
        if abs(delta) > STACK_ADJUST_LIMIT or not math.isfinite(delta):
            raise ValidationError(f"delta must be within ±{STACK_ADJUST_LIMIT}")
        p = self.get(pid)
        if p is None:
            raise PreconditionError("not seated")
        p.stack = max(0, p.stack + _round_half_up(delta))
        return [self._state_broadcast()]

    def chat(self, pid: str, text: Any) -> List[Outbound]:
        if not isinstance(text, str) or len(text) > CHAT_MAX_LEN:
            raise ValidationError(f"chat text must be at most {CHAT_MAX_LEN} characters")
        p = self.get(pid)
        return [Outbound("chat", {"from": p.name if p else ANONYMOUS, "msg": text})]

    def leave(self, pid: str) -> List[Outbound]:
        out = []
        p = self.get(pid)
        if p is not None:
            self.players.remove(p)
            if p.is_dealer:
                reassign_dealer_after_leave(self.players)
            logger.info("%s left seat %d", p.name, p.seat)
            out.append(self._state_broadcast())
        if not self.players:
            self.reset()
        return out

    def reset(self) -> None:
        """Стол опустел: всё обнуляется."""
        if self.phase is not Phase.IDLE or self.board:
            logger.info("table empty, resetting")
        self.players = []
        self.board = []
        self._source = None
        self.phase = Phase.IDLE
