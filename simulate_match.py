"""
Grid Duel — Match Simulator
Runs a complete simulated match between two AI-controlled fighters,
optionally pipes each round through the narrator.

Usage:
    python simulate_match.py                        # uses OPENAI_API_KEY env var
    python simulate_match.py --dry-run              # skip API calls, show structure only
    python simulate_match.py --rounds 3             # play at most 3 rounds
"""

from __future__ import annotations
import sys
import os
import json
import random
import argparse
from itertools import permutations
from typing import Optional

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from gridduel import grid
from gridduel.battle_log import describe_event, events_to_wire, render_field, result_label, to_dm_payload
from gridduel.cards import definition_of
from gridduel.config import DEFAULT_MODEL, configure_logging, load_settings
from gridduel.models import (
    AttackEffect, CardKind, CharacterState, DefendEffect, EnergyRecoveryEffect,
    GameState, MoveEffect, Player, Position, Selection,
)
from gridduel.room import GameRoom
from gridduel.rules import CARDS_PER_ROUND, validate_selection


STRATEGIES = ["aggressive", "defensive", "random"]


# ---------------------------------------------------------------------------
# AI Player — makes simple legal selections for simulation
# ---------------------------------------------------------------------------

class AIPlayer:
    """
    Picks three legal cards each round.
    Aggressive: strike if the opponent is in reach, otherwise close the distance.
    Defensive: guard and keep energy up, strike only when the opponent is in reach.
    Random: any legal selection.
    This is intentionally beatable; it's for simulation, not competition.
    """

    def __init__(self, player: Player, strategy: str = "aggressive", seed: Optional[int] = None):
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy {strategy!r}")
        self.player = player
        self.strategy = strategy
        self.rng = random.Random(seed)

    def choose_selection(self, state: GameState, strict: bool = True) -> Selection:
        me = state.get_character(self.player)
        opponent = state.get_character(Player.TWO if self.player == Player.ONE else Player.ONE)

        ranked = list(me.deck)
        if self.strategy == "random":
            self.rng.shuffle(ranked)
        else:
            scores = {kind: self._score(kind, me, opponent) for kind in ranked}
            tiebreak = {kind: self.rng.random() for kind in ranked}
            ranked.sort(key=lambda k: (scores[k], tiebreak[k]), reverse=True)

        # Moves are free, so a legal combination always exists
        for combo in permutations(ranked, CARDS_PER_ROUND):
            valid, _ = validate_selection(me, combo, strict=strict)
            if valid:
                return combo
        raise RuntimeError(f"No legal selection for {me.player_id}")

    def _score(self, kind: CardKind, me: CharacterState, opponent: CharacterState) -> float:
        definition = definition_of(kind)
        effect = definition.effect
        aggressive = self.strategy == "aggressive"

        if isinstance(effect, AttackEffect):
            targets = grid.resolve_attack_targets(me.position, effect.pattern)
            in_reach = opponent.position in targets
            return (effect.damage * (2 if aggressive else 1.5)) if in_reach else 1
        if isinstance(effect, MoveEffect):
            destination = grid.move(me.position, effect.direction)
            if destination is None:
                return -1
            closer = _distance(me.position, opponent.position) - _distance(destination, opponent.position)
            return 20 + 10 * (closer if aggressive else -closer)
        if isinstance(effect, DefendEffect):
            return 15 if aggressive else 45
        if isinstance(effect, EnergyRecoveryEffect):
            missing = me.max_energy - me.energy
            return missing if aggressive else missing + 10
        return 0


def _distance(a: Position, b: Position) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


# ---------------------------------------------------------------------------
# Match Simulator
# ---------------------------------------------------------------------------

def simulate_match(
    p1_name: str = "Lyra",
    p2_name: str = "Kael",
    p1_strategy: str = "aggressive",
    p2_strategy: str = "defensive",
    dry_run: bool = False,
    max_rounds: int = 10,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    seed: Optional[int] = None,
    strict_energy: bool = True,
    verbose: bool = True,
) -> dict:
    """
    Run a complete simulated match.
    Returns a dict with every round's events, narrator payloads and narrations.
    """
    if p1_name == p2_name:
        raise ValueError(f"Fighter names must differ (both are {p1_name!r})")

    def say(text: str = "") -> None:
        if verbose:
            print(text)

    say(f"\n{'=' * 60}")
    say(f"  ⚔  GRID DUEL")
    say(f"  {p1_name} ({p1_strategy}) vs {p2_name} ({p2_strategy})")
    say(f"{'=' * 60}")

    room = GameRoom(p1_name, p2_name, strict_energy=strict_energy)
    seeds = random.Random(seed)
    ai1 = AIPlayer(Player.ONE, p1_strategy, seed=seeds.randrange(2 ** 32))
    ai2 = AIPlayer(Player.TWO, p2_strategy, seed=seeds.randrange(2 ** 32))

    match_results = {
        "game_id": room.id,
        "p1_name": p1_name,
        "p2_name": p2_name,
        "rounds": [],
        "narrations": [],
        "result": None,
    }

    for _ in range(max_rounds):
        if room.is_game_ended():
            break

        state = room.game_state
        round_number = state.round
        say(f"\n{'─' * 60}")
        say(f"  ROUND {round_number}")
        say(f"  {p1_name}: {state.player1.hp} HP / {state.player1.energy} EN | "
            f"{p2_name}: {state.player2.hp} HP / {state.player2.energy} EN")
        say(render_field(state.player1.position, state.player2.position))

        for player_id, ai in ((p1_name, ai1), (p2_name, ai2)):
            ok, error = room.select_cards(player_id, ai.choose_selection(state, strict=strict_energy))
            if not ok:
                raise RuntimeError(f"AI produced an illegal selection: {error}")

        events = room.start_battle()
        outcome = room.game_state.history[-1]

        for event in events:
            say(f"  {describe_event(event, seat_names=(p1_name, p2_name))}")

        dm_payload = to_dm_payload(outcome, round_number, p1_name, p2_name)
        match_results["rounds"].append({
            "round": round_number,
            "events": events_to_wire(events),
            "dm_payload": dm_payload,
        })

        if dry_run:
            continue

        from gridduel.dm_agent import narrate_round
        say(f"\n  🎭 Requesting narration...")
        narration = narrate_round(dm_payload, api_key=api_key, model=model or DEFAULT_MODEL)
        match_results["narrations"].append({
            "round": round_number,
            "title": narration.round_title,
            "narration": narration.narration,
            "key_moment": narration.key_moment,
            "tone": narration.tone,
        })
        if verbose:
            narration.display()

    final = room.game_state
    match_results["result"] = final.result.value if final.result else None

    say(f"\n{'=' * 60}")
    if final.result:
        say(f"  🏆 {result_label(final.result, p1_name, p2_name)}")
    else:
        say(f"  ⏳ No result after {max_rounds} rounds")
    say(f"  Final HP: {p1_name} {final.player1.hp} | {p2_name} {final.player2.hp}")
    say(f"{'=' * 60}\n")

    return match_results


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Grid Duel Match Simulator")
    parser.add_argument("--dry-run", action="store_true",
                        help="Skip API calls, print BattleLog payloads instead")
    parser.add_argument("--rounds", type=int, default=10,
                        help="Maximum rounds to simulate (default: 10)")
    parser.add_argument("--p1", default="Lyra", help="Player 1 name")
    parser.add_argument("--p2", default="Kael", help="Player 2 name")
    parser.add_argument("--p1-strategy", default="aggressive", choices=STRATEGIES)
    parser.add_argument("--p2-strategy", default="defensive", choices=STRATEGIES)
    parser.add_argument("--seed", type=int, default=None, help="Seed for the AI players")

    args = parser.parse_args()
    if args.p1 == args.p2:
        parser.error("--p1 and --p2 must be different names")
    settings = load_settings()
    configure_logging(settings.log_level)

    if not settings.narration_enabled and not args.dry_run:
        print("⚠️  No OPENAI_API_KEY found. Running in dry-run mode.")
        args.dry_run = True

    results = simulate_match(
        p1_name=args.p1,
        p2_name=args.p2,
        p1_strategy=args.p1_strategy,
        p2_strategy=args.p2_strategy,
        dry_run=args.dry_run,
        max_rounds=args.rounds,
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        seed=args.seed,
        strict_energy=settings.strict_energy,
    )

    if args.dry_run:
        for r in results["rounds"]:
            print(json.dumps(r["dm_payload"], indent=2, ensure_ascii=False))

    output_file = f"match_{results['game_id']}.json"
    with open(output_file, "w") as f:
        json.dump(results, f, indent=2, default=str, ensure_ascii=False)
    print(f"📁 Match results saved to: {output_file}")
