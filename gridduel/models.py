"""
Grid Duel — Data Models
All battle state is represented here. Pure data, no rules.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Optional, Union
import uuid


# ---------------------------------------------------------------------------
# Grid primitives
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Position:
    x: int   # 0–3, left to right
    y: int   # 0–2, top to bottom

    def offset(self, dx: int, dy: int) -> Position:
        return Position(self.x + dx, self.y + dy)


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def vector(self) -> tuple[int, int]:
        return DIRECTION_VECTORS[self]


DIRECTION_VECTORS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CardKind(Enum):
    MOVE_UP = "MOVE_UP"
    MOVE_DOWN = "MOVE_DOWN"
    MOVE_LEFT = "MOVE_LEFT"
    MOVE_RIGHT = "MOVE_RIGHT"
    DEFEND = "DEFEND"
    ENERGY_RECOVERY = "ENERGY_RECOVERY"
    ATTACK_CROSS = "ATTACK_CROSS"
    ATTACK_FORWARD = "ATTACK_FORWARD"
    ATTACK_AREA = "ATTACK_AREA"
    ATTACK_DIAGONAL = "ATTACK_DIAGONAL"


class CardPriority(IntEnum):
    MOVE = 1
    DEFEND = 2
    ATTACK_ENERGY = 3


class CardCategory(Enum):
    MOVEMENT = "movement"
    DEFEND = "defend"
    ENERGY_RECOVERY = "energy_recovery"
    ATTACK = "attack"


class Player(Enum):
    ONE = 1
    TWO = 2


class GamePhase(Enum):
    WAITING = "WAITING"
    PREPARATION = "PREPARATION"
    BATTLE = "BATTLE"
    ENDED = "ENDED"


class GameResult(Enum):
    PLAYER1_WIN = "PLAYER1_WIN"
    PLAYER2_WIN = "PLAYER2_WIN"
    DRAW = "DRAW"


# ---------------------------------------------------------------------------
# Card effects (one variant per card category)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MoveEffect:
    direction: Direction


@dataclass(frozen=True)
class DefendEffect:
    reduction: int


@dataclass(frozen=True)
class EnergyRecoveryEffect:
    amount: int


@dataclass(frozen=True)
class AttackEffect:
    damage: int
    pattern: tuple[Position, ...]   # Offsets relative to the attacker


CardEffect = Union[MoveEffect, DefendEffect, EnergyRecoveryEffect, AttackEffect]

EFFECT_CATEGORIES: dict[type, CardCategory] = {
    MoveEffect: CardCategory.MOVEMENT,
    DefendEffect: CardCategory.DEFEND,
    EnergyRecoveryEffect: CardCategory.ENERGY_RECOVERY,
    AttackEffect: CardCategory.ATTACK,
}


# ---------------------------------------------------------------------------
# Card Definition (static rule data, shared by every player)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CardDefinition:
    kind: CardKind
    name: str
    priority: CardPriority
    energy_cost: int
    effect: CardEffect
    description: str

    @property
    def category(self) -> CardCategory:
        return EFFECT_CATEGORIES[type(self.effect)]


# Exactly three cards, resolved in index order
Selection = tuple[CardKind, CardKind, CardKind]


# ---------------------------------------------------------------------------
# Character State
# ---------------------------------------------------------------------------

@dataclass
class CharacterState:
    player_id: str
    position: Position
    deck: tuple[CardKind, ...]
    hp: int = 100
    max_hp: int = 100
    energy: int = 100
    max_energy: int = 100
    defense_active: bool = False     # Cleared at the start of every slot
    defense_amount: int = 0

    @property
    def is_defeated(self) -> bool:
        return self.hp <= 0

    def copy(self) -> CharacterState:
        """Value copy. Position and deck are immutable, so nothing is shared mutably."""
        return replace(self)


# ---------------------------------------------------------------------------
# Battle Events (the replay log)
# ---------------------------------------------------------------------------

class EventKind(Enum):
    CARD_REVEAL = "CARD_REVEAL"
    MOVE = "MOVE"
    DEFEND = "DEFEND"
    ATTACK = "ATTACK"
    ENERGY_RECOVERY = "ENERGY_RECOVERY"
    DAMAGE_DEALT = "DAMAGE_DEALT"
    GAME_END = "GAME_END"


@dataclass(frozen=True)
class CardReveal:
    player1_card: CardKind
    player2_card: CardKind


@dataclass(frozen=True)
class Moved:
    from_pos: Position
    to_pos: Position
    direction: Direction


@dataclass(frozen=True)
class Defended:
    amount: int


@dataclass(frozen=True)
class Attacked:
    card: CardKind
    hit: bool
    targets: frozenset[Position]


@dataclass(frozen=True)
class DamageDealt:
    damage: int
    new_hp: int


@dataclass(frozen=True)
class EnergyRecovered:
    amount: int
    new_energy: int


@dataclass(frozen=True)
class GameEnded:
    result: GameResult


EventData = Union[CardReveal, Moved, Defended, Attacked, DamageDealt, EnergyRecovered, GameEnded]

EVENT_KINDS: dict[type, EventKind] = {
    CardReveal: EventKind.CARD_REVEAL,
    Moved: EventKind.MOVE,
    Defended: EventKind.DEFEND,
    Attacked: EventKind.ATTACK,
    DamageDealt: EventKind.DAMAGE_DEALT,
    EnergyRecovered: EventKind.ENERGY_RECOVERY,
    GameEnded: EventKind.GAME_END,
}


@dataclass(frozen=True)
class BattleEvent:
    player_id: Optional[str]   # None for reveal and game-end events
    data: EventData
    slot: int                  # 0, 1 or 2

    @property
    def kind(self) -> EventKind:
        return EVENT_KINDS[type(self.data)]


@dataclass
class RoundOutcome:
    events: list[BattleEvent]
    player1: CharacterState
    player2: CharacterState
    result: Optional[GameResult]    # None = battle continues

    def __iter__(self):
        return iter((self.events, self.player1, self.player2, self.result))


# ---------------------------------------------------------------------------
# Match State (owned by the room controller between rounds)
# ---------------------------------------------------------------------------

@dataclass
class GameState:
    player1: CharacterState
    player2: CharacterState
    game_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    phase: GamePhase = GamePhase.PREPARATION
    round: int = 1
    player1_selection: Optional[Selection] = None
    player2_selection: Optional[Selection] = None
    result: Optional[GameResult] = None
    history: list[RoundOutcome] = field(default_factory=list)

    @property
    def player1_ready(self) -> bool:
        return self.player1_selection is not None

    @property
    def player2_ready(self) -> bool:
        return self.player2_selection is not None

    def get_character(self, player: Player) -> CharacterState:
        return self.player1 if player == Player.ONE else self.player2

    def player_of(self, player_id: str) -> Optional[Player]:
        if self.player1.player_id == player_id:
            return Player.ONE
        if self.player2.player_id == player_id:
            return Player.TWO
        return None
