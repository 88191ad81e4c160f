"""
Grid Duel — Battle Resolution
This is the deterministic core. No randomness, no I/O. Every outcome is replayable:
the same characters and selections always produce the same events and states.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from itertools import groupby
from typing import Optional, Sequence
from . import grid
from .cards import DEFAULT_DECK, can_use_card, definition_of
from .errors import BattlePreconditionError
from .models import (
    AttackEffect, Attacked, BattleEvent, CardKind, CardReveal, CharacterState,
    DamageDealt, DefendEffect, Defended, EnergyRecovered, EnergyRecoveryEffect,
    GameEnded, GameResult, GameState, MoveEffect, Moved, Position, RoundOutcome,
    Selection,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CARDS_PER_ROUND = 3
STARTING_HP = 100
STARTING_ENERGY = 100


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

def create_character(
    player_id: str,
    position: Position,
    max_hp: int = STARTING_HP,
    max_energy: int = STARTING_ENERGY,
    deck: Sequence[CardKind] = DEFAULT_DECK,
) -> CharacterState:
    """A fresh character: full HP, full energy, no defense."""
    return CharacterState(
        player_id=player_id,
        position=position,
        deck=tuple(deck),
        hp=max_hp,
        max_hp=max_hp,
        energy=max_energy,
        max_energy=max_energy,
    )


def create_new_game(player1_id: str, player2_id: str) -> GameState:
    left, right = grid.initial_positions()
    return GameState(
        player1=create_character(player1_id, left),
        player2=create_character(player2_id, right),
    )


# ---------------------------------------------------------------------------
# Selection validation
# ---------------------------------------------------------------------------

def validate_selection(
    character: CharacterState,
    selection: Sequence[CardKind],
    strict: bool = True,
) -> tuple[bool, str]:
    """
    Validate a player's three cards for the coming round.
    Returns (valid, error_message).

    strict=True replays this player's energy bookkeeping in resolution order:
    each card must be affordable from what is left after the cards before it.
    strict=False checks every card against the current energy independently.
    """
    if len(selection) != CARDS_PER_ROUND:
        return False, f"Exactly {CARDS_PER_ROUND} cards must be selected (got {len(selection)})"

    used: list[CardKind] = []
    energy = character.energy

    for kind in selection:
        # Card must be in the deck
        if kind not in character.deck:
            return False, f"{kind.value} is not in the deck"

        ok, reason = can_use_card(kind, energy if strict else character.energy, used)
        if not ok:
            return False, reason

        if strict:
            energy = _energy_after(character, energy, kind)
        used.append(kind)

    return True, ""


def _energy_after(character: CharacterState, energy: int, kind: CardKind) -> int:
    definition = definition_of(kind)
    energy = _clamp(energy - definition.energy_cost, 0, character.max_energy)
    if isinstance(definition.effect, EnergyRecoveryEffect):
        energy = min(character.max_energy, energy + definition.effect.amount)
    return energy


# ---------------------------------------------------------------------------
# Round resolution — the heart of the engine
# ---------------------------------------------------------------------------

@dataclass
class _PendingAction:
    actor: CharacterState
    opponent: CharacterState
    card: CardKind
    priority: int


def resolve_round(
    player1: CharacterState,
    player2: CharacterState,
    selection1: Optional[Selection],
    selection2: Optional[Selection],
) -> RoundOutcome:
    """
    Resolve one round of three card slots.
    The inputs are never modified; the returned outcome holds new states.

    Per slot: reveal both cards, clear defenses, then apply the two actions grouped
    by priority (movement, then defend, then attack / energy recovery). Both actions
    of a group always apply before the win check, so a double knockout is a draw.
    """
    if not selection1 or not selection2:
        raise BattlePreconditionError("Both players must select cards before battle")
    if len(selection1) != CARDS_PER_ROUND or len(selection2) != CARDS_PER_ROUND:
        raise BattlePreconditionError(
            f"Selections must hold exactly {CARDS_PER_ROUND} cards "
            f"(got {len(selection1)} and {len(selection2)})"
        )

    p1 = player1.copy()
    p2 = player2.copy()
    events: list[BattleEvent] = []
    result: Optional[GameResult] = None

    for slot in range(CARDS_PER_ROUND):
        card1, card2 = selection1[slot], selection2[slot]
        logger.debug("slot %d: %s=%s %s=%s", slot, p1.player_id, card1.value, p2.player_id, card2.value)

        events.append(BattleEvent(None, CardReveal(card1, card2), slot))

        for character in (p1, p2):
            character.defense_active = False
            character.defense_amount = 0

        actions = [
            _PendingAction(p1, p2, card1, definition_of(card1).priority),
            _PendingAction(p2, p1, card2, definition_of(card2).priority),
        ]

        for _, group in _priority_groups(actions):
            for action in group:
                events.extend(_apply_action(action, slot))

            result = check_game_end(p1, p2)
            if result is not None:
                logger.debug("slot %d: battle over, %s", slot, result.value)
                events.append(BattleEvent(None, GameEnded(result), slot))
                break

        if result is not None:
            break

    return RoundOutcome(events=events, player1=p1, player2=p2, result=result)


def check_game_end(player1: CharacterState, player2: CharacterState) -> Optional[GameResult]:
    if player1.is_defeated and player2.is_defeated:
        return GameResult.DRAW
    if player1.is_defeated:
        return GameResult.PLAYER2_WIN
    if player2.is_defeated:
        return GameResult.PLAYER1_WIN
    return None


def _priority_groups(actions: list[_PendingAction]):
    """Ascending priority; the sort is stable so player 1 stays ahead of player 2."""
    ordered = sorted(actions, key=lambda a: a.priority)
    return ((priority, list(group)) for priority, group in groupby(ordered, key=lambda a: a.priority))


def _apply_action(action: _PendingAction, slot: int) -> list[BattleEvent]:
    actor = action.actor
    definition = definition_of(action.card)

    actor.energy = _clamp(actor.energy - definition.energy_cost, 0, actor.max_energy)

    effect = definition.effect
    if isinstance(effect, MoveEffect):
        return _apply_move(actor, effect, slot)
    if isinstance(effect, DefendEffect):
        return _apply_defend(actor, effect, slot)
    if isinstance(effect, EnergyRecoveryEffect):
        return _apply_energy_recovery(actor, effect, slot)
    if isinstance(effect, AttackEffect):
        return _apply_attack(actor, action.opponent, action.card, effect, slot)
    raise TypeError(f"Unhandled card effect {effect!r}")


def _apply_move(actor: CharacterState, effect: MoveEffect, slot: int) -> list[BattleEvent]:
    destination = grid.move(actor.position, effect.direction)
    if destination is None:
        # Blocked by the wall: no movement, no event
        logger.debug("%s bumped the wall moving %s", actor.player_id, effect.direction.value)
        return []

    origin = actor.position
    actor.position = destination
    return [BattleEvent(actor.player_id, Moved(origin, destination, effect.direction), slot)]


def _apply_defend(actor: CharacterState, effect: DefendEffect, slot: int) -> list[BattleEvent]:
    actor.defense_active = True
    actor.defense_amount = effect.reduction
    return [BattleEvent(actor.player_id, Defended(effect.reduction), slot)]


def _apply_energy_recovery(actor: CharacterState, effect: EnergyRecoveryEffect, slot: int) -> list[BattleEvent]:
    actor.energy = _clamp(actor.energy + effect.amount, 0, actor.max_energy)
    return [BattleEvent(actor.player_id, EnergyRecovered(effect.amount, actor.energy), slot)]


def _apply_attack(
    attacker: CharacterState,
    defender: CharacterState,
    card: CardKind,
    effect: AttackEffect,
    slot: int,
) -> list[BattleEvent]:
    # Positions here already include this slot's movement
    targets = grid.resolve_attack_targets(attacker.position, effect.pattern)
    hit = any(grid.same_cell(cell, defender.position) for cell in targets)

    events = [BattleEvent(attacker.player_id, Attacked(card, hit, targets), slot)]
    if not hit:
        return events

    damage = effect.damage
    if defender.defense_active:
        damage = max(0, damage - defender.defense_amount)
        # Defense absorbs only the first landing hit
        defender.defense_active = False
        defender.defense_amount = 0

    defender.hp = max(0, defender.hp - damage)
    events.append(BattleEvent(defender.player_id, DamageDealt(damage, defender.hp), slot))
    return events


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
