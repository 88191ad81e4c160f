"""
Grid Duel — BattleLog Serializer
Converts engine output into plain dicts: the wire payloads the room layer
broadcasts, and the narrator payload. Neither consumer ever touches live state.
"""

from __future__ import annotations
from typing import Optional
from . import grid
from .models import (
    Attacked, BattleEvent, CardReveal, CharacterState, DamageDealt, Defended,
    EnergyRecovered, GameEnded, GameResult, GameState, Moved, Position, RoundOutcome,
)


# ---------------------------------------------------------------------------
# Wire encoding (camelCase, same shape the client replays)
# ---------------------------------------------------------------------------

def position_to_wire(pos: Position) -> dict:
    return {"x": pos.x, "y": pos.y}


def event_to_wire(event: BattleEvent) -> dict:
    return {
        "type": event.kind.value,
        "playerId": event.player_id or "",
        "data": _event_data(event),
        "cardIndex": event.slot,
    }


def events_to_wire(events: list[BattleEvent]) -> list[dict]:
    return [event_to_wire(e) for e in events]


def character_to_wire(character: CharacterState) -> dict:
    return {
        "playerId": character.player_id,
        "stats": {
            "hp": character.hp,
            "maxHp": character.max_hp,
            "energy": character.energy,
            "maxEnergy": character.max_energy,
        },
        "position": position_to_wire(character.position),
        "deck": [k.value for k in character.deck],
        "defenseActive": character.defense_active,
        "defenseAmount": character.defense_amount,
    }


def state_to_wire(state: GameState) -> dict:
    def selection(sel):
        return [k.value for k in sel] if sel else None

    return {
        "gameId": state.game_id,
        "phase": state.phase.value,
        "round": state.round,
        "player1": character_to_wire(state.player1),
        "player2": character_to_wire(state.player2),
        "player1Selection": selection(state.player1_selection),
        "player2Selection": selection(state.player2_selection),
        "player1Ready": state.player1_ready,
        "player2Ready": state.player2_ready,
        "result": state.result.value if state.result else None,
    }


def _event_data(event: BattleEvent) -> dict:
    data = event.data
    if isinstance(data, CardReveal):
        return {
            "cardIndex": event.slot,
            "player1Card": data.player1_card.value,
            "player2Card": data.player2_card.value,
        }
    if isinstance(data, Moved):
        return {
            "from": position_to_wire(data.from_pos),
            "to": position_to_wire(data.to_pos),
            "direction": data.direction.value,
        }
    if isinstance(data, Defended):
        return {"amount": data.amount}
    if isinstance(data, Attacked):
        return {
            "cardType": data.card.value,
            "hit": data.hit,
            "targets": [position_to_wire(p) for p in sorted(data.targets, key=lambda p: (p.y, p.x))],
        }
    if isinstance(data, DamageDealt):
        return {"damage": data.damage, "newHp": data.new_hp}
    if isinstance(data, EnergyRecovered):
        return {"amount": data.amount, "newEnergy": data.new_energy}
    if isinstance(data, GameEnded):
        return {"result": data.result.value}
    raise TypeError(f"Unhandled event payload {data!r}")


# ---------------------------------------------------------------------------
# Human-readable log
# ---------------------------------------------------------------------------

def describe_event(
    event: BattleEvent,
    names: Optional[dict[str, str]] = None,
    seat_names: tuple[str, str] = ("Player 1", "Player 2"),
) -> str:
    """
    One line of battle log text, e.g. 'Lyra moved right to (1, 1)'.
    names maps player ids to display names; seat_names labels the game result.
    """
    names = names or {}
    who = names.get(event.player_id, event.player_id) if event.player_id else ""
    data = event.data

    if isinstance(data, CardReveal):
        return f"Card {event.slot + 1}: {data.player1_card.value} vs {data.player2_card.value}"
    if isinstance(data, Moved):
        return f"{who} moved {data.direction.value} to ({data.to_pos.x}, {data.to_pos.y})"
    if isinstance(data, Defended):
        return f"{who} braces for impact (-{data.amount} damage)"
    if isinstance(data, Attacked):
        return f"{who} used {data.card.value}: {'hit' if data.hit else 'miss'}"
    if isinstance(data, DamageDealt):
        return f"{who} took {data.damage} damage ({data.new_hp} HP left)"
    if isinstance(data, EnergyRecovered):
        return f"{who} recovered {data.amount} energy ({data.new_energy} now)"
    if isinstance(data, GameEnded):
        return f"Battle over: {result_label(data.result, *seat_names)}"
    raise TypeError(f"Unhandled event payload {data!r}")


def render_field(player1_pos: Position, player2_pos: Position) -> str:
    """Text view of the board for logs and the CLI."""
    lines = ["┌" + "─" * (grid.WIDTH * 3 + 1) + "┐"]
    for y in range(grid.HEIGHT):
        row = ""
        for x in range(grid.WIDTH):
            cell = Position(x, y)
            if grid.same_cell(cell, player1_pos):
                row += "P1 "
            elif grid.same_cell(cell, player2_pos):
                row += "P2 "
            else:
                row += "·  "
        lines.append("│ " + row + "│")
    lines.append("└" + "─" * (grid.WIDTH * 3 + 1) + "┘")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Narrator payload
# ---------------------------------------------------------------------------

def to_dm_payload(
    outcome: RoundOutcome,
    round_number: int,
    p1_name: str = "Player 1",
    p2_name: str = "Player 2",
) -> dict:
    """
    Serialize a resolved round into the narrator's input payload.
    Every field the narrator needs is here. Nothing more.
    """
    if p1_name == p2_name:
        raise ValueError(f"Fighter names must differ (both are {p1_name!r})")
    names = {outcome.player1.player_id: p1_name, outcome.player2.player_id: p2_name}

    slots: list[dict] = []
    for event in outcome.events:
        if isinstance(event.data, CardReveal):
            slots.append({
                "slot": event.slot + 1,
                "cards": {
                    p1_name: event.data.player1_card.value,
                    p2_name: event.data.player2_card.value,
                },
                "beats": [],
            })
        elif slots:
            slots[-1]["beats"].append(describe_event(event, names, (p1_name, p2_name)))

    def fighter(c: CharacterState) -> dict:
        return {
            "hp": c.hp,
            "max_hp": c.max_hp,
            "energy": c.energy,
            "position": position_to_wire(c.position),
        }

    return {
        "round": round_number,
        "slots": slots,
        "fighters": {
            p1_name: fighter(outcome.player1),
            p2_name: fighter(outcome.player2),
        },
        "battle_result": result_label(outcome.result, p1_name, p2_name) if outcome.result else None,
        "instructions": (
            "Narrate this round of a grid duel in 100-200 words. Walk through the card slots "
            "in order. Do not change any outcome: positions, damage and the result are fixed. "
            "If battle_result is set, deliver a conclusion."
        ),
    }


def result_label(result: GameResult, p1_name: str = "Player 1", p2_name: str = "Player 2") -> str:
    if result == GameResult.DRAW:
        return "Draw, both fighters fell together"
    return f"{p1_name if result == GameResult.PLAYER1_WIN else p2_name} wins"
