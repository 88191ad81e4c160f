import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from gridduel.cards import CARD_DEFINITIONS, DEFAULT_DECK, can_use_card, definition_of
from gridduel.models import (
    AttackEffect, CardCategory, CardKind, CardPriority, DefendEffect,
    Direction, EnergyRecoveryEffect, MoveEffect, Position,
)

K = CardKind


def test_catalog_covers_every_kind():
    assert set(CARD_DEFINITIONS) == set(CardKind)
    assert DEFAULT_DECK == (
        K.MOVE_UP, K.MOVE_DOWN, K.MOVE_LEFT, K.MOVE_RIGHT,
        K.DEFEND, K.ENERGY_RECOVERY,
        K.ATTACK_CROSS, K.ATTACK_FORWARD, K.ATTACK_AREA, K.ATTACK_DIAGONAL,
    )


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        CARD_DEFINITIONS[K.DEFEND] = None


def test_moves_are_free_and_first():
    for kind, direction in (
        (K.MOVE_UP, Direction.UP), (K.MOVE_DOWN, Direction.DOWN),
        (K.MOVE_LEFT, Direction.LEFT), (K.MOVE_RIGHT, Direction.RIGHT),
    ):
        d = definition_of(kind)
        assert d.energy_cost == 0
        assert d.priority == CardPriority.MOVE
        assert d.effect == MoveEffect(direction)
        assert d.category == CardCategory.MOVEMENT


def test_defend_and_recovery_values():
    defend = definition_of(K.DEFEND)
    assert (defend.energy_cost, defend.priority) == (10, CardPriority.DEFEND)
    assert defend.effect == DefendEffect(15)

    recovery = definition_of(K.ENERGY_RECOVERY)
    assert (recovery.energy_cost, recovery.priority) == (0, CardPriority.ATTACK_ENERGY)
    assert recovery.effect == EnergyRecoveryEffect(30)


@pytest.mark.parametrize("kind,damage,cost,offsets", [
    (K.ATTACK_CROSS, 30, 20, {(0, -1), (0, 1), (-1, 0), (1, 0)}),
    (K.ATTACK_FORWARD, 25, 15, {(1, -1), (1, 0), (1, 1)}),
    (K.ATTACK_DIAGONAL, 28, 25, {(-1, -1), (1, -1), (-1, 1), (1, 1)}),
    (K.ATTACK_AREA, 20, 40, {(x, y) for x in (-1, 0, 1) for y in (-1, 0, 1)}),
])
def test_attack_values(kind, damage, cost, offsets):
    d = definition_of(kind)
    assert isinstance(d.effect, AttackEffect)
    assert d.effect.damage == damage
    assert d.energy_cost == cost
    assert d.priority == CardPriority.ATTACK_ENERGY
    assert {(p.x, p.y) for p in d.effect.pattern} == offsets
    assert all(isinstance(p, Position) for p in d.effect.pattern)


def test_can_use_card():
    assert can_use_card(K.ATTACK_AREA, 40, []) == (True, "")

    ok, msg = can_use_card(K.ATTACK_AREA, 39, [])
    assert not ok
    assert msg == "Insufficient energy for ATTACK_AREA (need 40, have 39)"

    ok, msg = can_use_card(K.DEFEND, 100, [K.DEFEND])
    assert not ok
    assert "more than once" in msg
