"""
Grid Duel — Battlefield Geometry
A 4x3 board. Stateless spatial queries only.
"""

from __future__ import annotations
from typing import Iterable, Optional
from .models import Direction, Position


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

WIDTH = 4
HEIGHT = 3

LEFT_ANCHOR = Position(0, 1)     # Player 1 start
RIGHT_ANCHOR = Position(3, 1)    # Player 2 start


def initial_positions() -> tuple[Position, Position]:
    return LEFT_ANCHOR, RIGHT_ANCHOR


def is_valid(position: Position) -> bool:
    return 0 <= position.x < WIDTH and 0 <= position.y < HEIGHT


def move(position: Position, direction: Direction) -> Optional[Position]:
    """
    One step in the given direction.
    Returns None when the step would leave the board; the caller stays put.
    """
    dx, dy = direction.vector
    destination = position.offset(dx, dy)
    return destination if is_valid(destination) else None


def resolve_attack_targets(caster: Position, pattern: Iterable[Position]) -> frozenset[Position]:
    """Absolute cells covered by an attack pattern, clipped to the board."""
    cells = (caster.offset(o.x, o.y) for o in pattern)
    return frozenset(c for c in cells if is_valid(c))


def same_cell(a: Position, b: Position) -> bool:
    return a.x == b.x and a.y == b.y


def all_cells() -> list[Position]:
    return [Position(x, y) for y in range(HEIGHT) for x in range(WIDTH)]
