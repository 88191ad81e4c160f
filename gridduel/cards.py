"""
Grid Duel — Card Catalog
Ten cards: four moves, one defend, one energy recovery, four attacks.
Loaded once at import and never modified.
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Iterable, Mapping
from .models import (
    AttackEffect, CardDefinition, CardKind, CardPriority, DefendEffect,
    Direction, EnergyRecoveryEffect, MoveEffect, Position,
)


def _pattern(*offsets: tuple[int, int]) -> tuple[Position, ...]:
    return tuple(Position(x, y) for x, y in offsets)


_DEFINITIONS: list[CardDefinition] = [

    # ── MOVEMENT (priority 1, free) ───────────────────────────────────────
    CardDefinition(
        kind=CardKind.MOVE_UP,
        name="Move Up",
        priority=CardPriority.MOVE,
        energy_cost=0,
        effect=MoveEffect(Direction.UP),
        description="Move one cell up",
    ),
    CardDefinition(
        kind=CardKind.MOVE_DOWN,
        name="Move Down",
        priority=CardPriority.MOVE,
        energy_cost=0,
        effect=MoveEffect(Direction.DOWN),
        description="Move one cell down",
    ),
    CardDefinition(
        kind=CardKind.MOVE_LEFT,
        name="Move Left",
        priority=CardPriority.MOVE,
        energy_cost=0,
        effect=MoveEffect(Direction.LEFT),
        description="Move one cell left",
    ),
    CardDefinition(
        kind=CardKind.MOVE_RIGHT,
        name="Move Right",
        priority=CardPriority.MOVE,
        energy_cost=0,
        effect=MoveEffect(Direction.RIGHT),
        description="Move one cell right",
    ),

    # ── DEFEND (priority 2) ───────────────────────────────────────────────
    CardDefinition(
        kind=CardKind.DEFEND,
        name="Defend",
        priority=CardPriority.DEFEND,
        energy_cost=10,
        effect=DefendEffect(reduction=15),
        description="Reduce the next hit this card slot by 15",
    ),

    # ── ENERGY RECOVERY (priority 3) ──────────────────────────────────────
    CardDefinition(
        kind=CardKind.ENERGY_RECOVERY,
        name="Energy Recovery",
        priority=CardPriority.ATTACK_ENERGY,
        energy_cost=0,
        effect=EnergyRecoveryEffect(amount=30),
        description="Recover 30 energy (up to max)",
    ),

    # ── ATTACKS (priority 3) ──────────────────────────────────────────────
    CardDefinition(
        kind=CardKind.ATTACK_CROSS,
        name="Cross Strike",
        priority=CardPriority.ATTACK_ENERGY,
        energy_cost=20,
        effect=AttackEffect(
            damage=30,
            pattern=_pattern((0, -1), (0, 1), (-1, 0), (1, 0)),
        ),
        description="Hits the four orthogonal neighbours for 30",
    ),
    CardDefinition(
        kind=CardKind.ATTACK_FORWARD,
        name="Forward Sweep",
        priority=CardPriority.ATTACK_ENERGY,
        energy_cost=15,
        effect=AttackEffect(
            damage=25,
            pattern=_pattern((1, -1), (1, 0), (1, 1)),
        ),
        description="Hits the three-cell lane to the right for 25",
    ),
    CardDefinition(
        kind=CardKind.ATTACK_AREA,
        name="Area Burst",
        priority=CardPriority.ATTACK_ENERGY,
        energy_cost=40,
        effect=AttackEffect(
            damage=20,
            pattern=_pattern(
                (-1, -1), (0, -1), (1, -1),
                (-1, 0), (0, 0), (1, 0),
                (-1, 1), (0, 1), (1, 1),
            ),
        ),
        description="Hits the whole 3x3 block around the caster for 20",
    ),
    CardDefinition(
        kind=CardKind.ATTACK_DIAGONAL,
        name="Diagonal Slash",
        priority=CardPriority.ATTACK_ENERGY,
        energy_cost=25,
        effect=AttackEffect(
            damage=28,
            pattern=_pattern((-1, -1), (1, -1), (-1, 1), (1, 1)),
        ),
        description="Hits the four diagonal neighbours for 28",
    ),
]

# Quick lookup by kind
CARD_DEFINITIONS: Mapping[CardKind, CardDefinition] = MappingProxyType(
    {d.kind: d for d in _DEFINITIONS}
)

DEFAULT_DECK: tuple[CardKind, ...] = tuple(d.kind for d in _DEFINITIONS)


def definition_of(kind: CardKind) -> CardDefinition:
    return CARD_DEFINITIONS[kind]


def can_use_card(kind: CardKind, energy: int, used: Iterable[CardKind]) -> tuple[bool, str]:
    """Card-level check: not already chosen and affordable with the given energy."""
    if kind in used:
        return False, f"{kind.value} selected more than once"
    cost = definition_of(kind).energy_cost
    if energy < cost:
        return False, f"Insufficient energy for {kind.value} (need {cost}, have {energy})"
    return True, ""
