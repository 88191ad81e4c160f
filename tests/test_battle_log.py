import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from gridduel.battle_log import (
    character_to_wire, describe_event, event_to_wire, render_field,
    result_label, state_to_wire, to_dm_payload,
)
from gridduel.models import (
    Attacked, BattleEvent, CardKind, CardReveal, DamageDealt, Direction,
    GameEnded, GameResult, Moved, Position,
)
from gridduel.rules import create_character, create_new_game, resolve_round

K = CardKind


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def sample_outcome(b_hp=100):
    a = create_character("a", Position(1, 1))
    b = create_character("b", Position(2, 1))
    b.hp = b_hp
    return resolve_round(
        a, b,
        (K.ATTACK_CROSS, K.ENERGY_RECOVERY, K.DEFEND),
        (K.DEFEND, K.ENERGY_RECOVERY, K.ATTACK_CROSS),
    )


# ---------------------------------------------------------------------------
# Wire encoding
# ---------------------------------------------------------------------------

def test_reveal_wire_has_empty_player_id():
    event = BattleEvent(None, CardReveal(K.ATTACK_CROSS, K.DEFEND), 0)
    assert event_to_wire(event) == {
        "type": "CARD_REVEAL",
        "playerId": "",
        "data": {"cardIndex": 0, "player1Card": "ATTACK_CROSS", "player2Card": "DEFEND"},
        "cardIndex": 0,
    }


def test_move_wire():
    event = BattleEvent("a", Moved(Position(0, 1), Position(1, 1), Direction.RIGHT), 2)
    wire = event_to_wire(event)
    assert wire["type"] == "MOVE"
    assert wire["playerId"] == "a"
    assert wire["data"] == {"from": {"x": 0, "y": 1}, "to": {"x": 1, "y": 1}, "direction": "right"}
    assert wire["cardIndex"] == 2


def test_attack_wire_targets_are_row_ordered():
    targets = frozenset({Position(2, 1), Position(1, 0), Position(0, 1), Position(1, 2)})
    wire = event_to_wire(BattleEvent("a", Attacked(K.ATTACK_CROSS, True, targets), 0))
    assert wire["data"]["cardType"] == "ATTACK_CROSS"
    assert wire["data"]["hit"] is True
    assert wire["data"]["targets"] == [
        {"x": 1, "y": 0}, {"x": 0, "y": 1}, {"x": 2, "y": 1}, {"x": 1, "y": 2},
    ]


def test_damage_and_end_wire():
    assert event_to_wire(BattleEvent("b", DamageDealt(15, 85), 0))["data"] == {"damage": 15, "newHp": 85}
    end = event_to_wire(BattleEvent(None, GameEnded(GameResult.DRAW), 1))
    assert end["type"] == "GAME_END"
    assert end["data"] == {"result": "DRAW"}


def test_character_wire():
    wire = character_to_wire(create_character("a", Position(0, 1)))
    assert wire["playerId"] == "a"
    assert wire["stats"] == {"hp": 100, "maxHp": 100, "energy": 100, "maxEnergy": 100}
    assert wire["position"] == {"x": 0, "y": 1}
    assert len(wire["deck"]) == 10
    assert wire["defenseActive"] is False


def test_state_wire_for_new_game():
    state = create_new_game("p1", "p2")
    wire = state_to_wire(state)
    assert wire["gameId"] == state.game_id
    assert wire["phase"] == "PREPARATION"
    assert wire["round"] == 1
    assert wire["player1Selection"] is None
    assert wire["player1Ready"] is False
    assert wire["result"] is None


# ---------------------------------------------------------------------------
# Human-readable text
# ---------------------------------------------------------------------------

def test_describe_events():
    names = {"a": "Lyra", "b": "Kael"}
    reveal = BattleEvent(None, CardReveal(K.MOVE_RIGHT, K.DEFEND), 0)
    move = BattleEvent("a", Moved(Position(0, 1), Position(1, 1), Direction.RIGHT), 0)
    damage = BattleEvent("b", DamageDealt(30, 70), 1)
    end = BattleEvent(None, GameEnded(GameResult.PLAYER2_WIN), 2)

    assert describe_event(reveal, names) == "Card 1: MOVE_RIGHT vs DEFEND"
    assert describe_event(move, names) == "Lyra moved right to (1, 1)"
    assert describe_event(damage, names) == "Kael took 30 damage (70 HP left)"
    assert describe_event(end, names, ("Lyra", "Kael")) == "Battle over: Kael wins"
    # Without names the raw player id is shown
    assert describe_event(move) == "a moved right to (1, 1)"


def test_result_label():
    assert result_label(GameResult.PLAYER1_WIN, "Lyra", "Kael") == "Lyra wins"
    assert result_label(GameResult.DRAW) == "Draw, both fighters fell together"


def test_render_field():
    lines = render_field(Position(0, 1), Position(3, 1)).split("\n")
    assert len(lines) == 5
    assert lines[2] == "│ P1 ·  ·  P2 │"
    assert "P1" not in lines[1] and "P2" not in lines[3]


# ---------------------------------------------------------------------------
# Narrator payload
# ---------------------------------------------------------------------------

def test_dm_payload_groups_beats_by_slot():
    payload = to_dm_payload(sample_outcome(), 1, "Lyra", "Kael")
    assert payload["round"] == 1
    assert [s["slot"] for s in payload["slots"]] == [1, 2, 3]
    first = payload["slots"][0]
    assert first["cards"] == {"Lyra": "ATTACK_CROSS", "Kael": "DEFEND"}
    assert first["beats"] == [
        "Kael braces for impact (-15 damage)",
        "Lyra used ATTACK_CROSS: hit",
        "Kael took 15 damage (85 HP left)",
    ]
    assert payload["fighters"]["Lyra"]["hp"] == 85
    assert payload["fighters"]["Kael"]["position"] == {"x": 2, "y": 1}
    assert payload["battle_result"] is None
    assert "instructions" in payload


def test_dm_payload_reports_winner():
    payload = to_dm_payload(sample_outcome(b_hp=15), 4, "Lyra", "Kael")
    assert payload["battle_result"] == "Lyra wins"
    assert len(payload["slots"]) == 1
    assert payload["slots"][0]["beats"][-1] == "Battle over: Lyra wins"


def test_dm_payload_rejects_identical_names():
    with pytest.raises(ValueError):
        to_dm_payload(sample_outcome(), 1, "Lyra", "Lyra")
