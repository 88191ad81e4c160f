import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from gridduel.models import GameResult, Player
from gridduel.rules import create_new_game, validate_selection
from simulate_match import STRATEGIES, AIPlayer, simulate_match


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_ai_always_picks_a_legal_selection(strategy):
    state = create_new_game("a", "b")
    ai = AIPlayer(Player.ONE, strategy, seed=3)
    for energy in (0, 10, 25, 55, 100):
        state.player1.energy = energy
        selection = ai.choose_selection(state)
        assert validate_selection(state.player1, selection) == (True, "")


def test_unknown_strategy():
    with pytest.raises(ValueError):
        AIPlayer(Player.ONE, "berserk")


def test_dry_run_match():
    results = simulate_match(dry_run=True, max_rounds=5, seed=11, verbose=False)
    assert results["p1_name"] == "Lyra"
    assert 1 <= len(results["rounds"]) <= 5
    assert results["narrations"] == []
    first = results["rounds"][0]
    assert first["round"] == 1
    assert first["events"][0]["type"] == "CARD_REVEAL"
    assert [s["slot"] for s in first["dm_payload"]["slots"]][0] == 1
    assert results["result"] in (None, *(r.value for r in GameResult))


def test_seeded_matches_repeat():
    first = simulate_match(dry_run=True, max_rounds=4, seed=5, verbose=False)
    second = simulate_match(dry_run=True, max_rounds=4, seed=5, verbose=False)
    assert first["rounds"] == second["rounds"]
    assert first["result"] == second["result"]


def test_identical_names_rejected():
    with pytest.raises(ValueError):
        simulate_match(p1_name="Lyra", p2_name="Lyra", dry_run=True, verbose=False)
