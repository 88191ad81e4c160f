"""
Grid Duel — Game Room
Owns one match across rounds: collects both selections, runs the engine once
both are in, and carries the resulting characters into the next round.
"""

from __future__ import annotations
import logging
import uuid
from typing import Optional, Sequence
from .errors import RoomStateError
from .models import BattleEvent, CardKind, GamePhase, GameResult, GameState, Player
from .rules import create_new_game, resolve_round, validate_selection

logger = logging.getLogger(__name__)


class GameRoom:

    def __init__(
        self,
        player1_id: str,
        player2_id: str,
        room_id: Optional[str] = None,
        strict_energy: bool = True,
    ):
        self.id = room_id or f"game-{uuid.uuid4().hex[:12]}"
        self.strict_energy = strict_energy
        self.game_state: GameState = create_new_game(player1_id, player2_id)
        logger.info("room %s created: %s vs %s", self.id, player1_id, player2_id)

    # -----------------------------------------------------------------------
    # Card selection
    # -----------------------------------------------------------------------

    def select_cards(self, player_id: str, cards: Sequence[CardKind]) -> tuple[bool, str]:
        """Record a player's cards for this round. Returns (accepted, error_message)."""
        state = self.game_state
        if state.phase != GamePhase.PREPARATION:
            return False, "Cards can only be selected during preparation"

        seat = state.player_of(player_id)
        if seat is None:
            return False, f"Player {player_id} is not in this room"

        valid, error = validate_selection(state.get_character(seat), cards, strict=self.strict_energy)
        if not valid:
            logger.info("room %s: rejected selection from %s: %s", self.id, player_id, error)
            return False, error

        selection = tuple(cards)
        if seat == Player.ONE:
            state.player1_selection = selection
        else:
            state.player2_selection = selection
        logger.info("room %s: %s selected %s", self.id, player_id, ", ".join(k.value for k in selection))
        return True, ""

    def is_both_players_ready(self) -> bool:
        return self.game_state.player1_ready and self.game_state.player2_ready

    # -----------------------------------------------------------------------
    # Battle
    # -----------------------------------------------------------------------

    def start_battle(self) -> list[BattleEvent]:
        """Resolve the round. Both players must have selected."""
        if self.game_state.phase != GamePhase.PREPARATION:
            raise RoomStateError(f"Cannot start a battle during {self.game_state.phase.value}")
        if not self.is_both_players_ready():
            raise RoomStateError("Both players must be ready to start battle")

        state = self.game_state
        state.phase = GamePhase.BATTLE
        logger.info("room %s: round %d battle", self.id, state.round)

        outcome = resolve_round(
            state.player1, state.player2,
            state.player1_selection, state.player2_selection,
        )
        state.player1 = outcome.player1
        state.player2 = outcome.player2
        state.history.append(outcome)

        if outcome.result is not None:
            self._finish(outcome.result)
        else:
            self._prepare_next_round()

        return outcome.events

    def forfeit(self, player_id: str) -> GameResult:
        """A disconnect counts as a loss for the leaving player."""
        seat = self.game_state.player_of(player_id)
        if seat is None:
            raise RoomStateError(f"Player {player_id} is not in this room")
        if self.is_game_ended():
            return self.game_state.result

        result = GameResult.PLAYER2_WIN if seat == Player.ONE else GameResult.PLAYER1_WIN
        logger.info("room %s: %s forfeits", self.id, player_id)
        self._finish(result)
        return result

    def _finish(self, result: GameResult) -> None:
        self.game_state.result = result
        self.game_state.phase = GamePhase.ENDED
        self.game_state.player1_selection = None
        self.game_state.player2_selection = None
        logger.info("room %s: game over, %s", self.id, result.value)

    def _prepare_next_round(self) -> None:
        state = self.game_state
        state.round += 1
        state.phase = GamePhase.PREPARATION
        state.player1_selection = None
        state.player2_selection = None
        logger.info("room %s: round %d preparation", self.id, state.round)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def has_player(self, player_id: str) -> bool:
        return self.game_state.player_of(player_id) is not None

    def get_opponent_id(self, player_id: str) -> Optional[str]:
        seat = self.game_state.player_of(player_id)
        if seat == Player.ONE:
            return self.game_state.player2.player_id
        if seat == Player.TWO:
            return self.game_state.player1.player_id
        return None

    def winner_id(self) -> Optional[str]:
        result = self.game_state.result
        if result == GameResult.PLAYER1_WIN:
            return self.game_state.player1.player_id
        if result == GameResult.PLAYER2_WIN:
            return self.game_state.player2.player_id
        return None

    def is_game_ended(self) -> bool:
        return self.game_state.phase == GamePhase.ENDED
