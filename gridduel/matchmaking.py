"""
Grid Duel — Matchmaking
First come, first paired. All bookkeeping lives on the service instance.
"""

from __future__ import annotations
import logging
from typing import Optional
from .room import GameRoom

logger = logging.getLogger(__name__)


class MatchmakingService:

    def __init__(self, strict_energy: bool = True):
        self.strict_energy = strict_energy
        self._waiting: list[str] = []                  # FIFO
        self._active_games: dict[str, GameRoom] = {}
        self._player_rooms: dict[str, str] = {}

    def join_matchmaking(self, player_id: str) -> Optional[GameRoom]:
        """
        Queue a player, or pair them with the longest-waiting opponent.
        Returns the new room when a match is made, otherwise None.
        """
        if player_id in self._player_rooms:
            logger.info("%s is already in a game", player_id)
            return None
        if player_id in self._waiting:
            return None

        if not self._waiting:
            self._waiting.append(player_id)
            logger.info("%s added to matchmaking queue", player_id)
            return None

        opponent = self._waiting.pop(0)
        room = GameRoom(opponent, player_id, strict_energy=self.strict_energy)
        self._active_games[room.id] = room
        self._player_rooms[opponent] = room.id
        self._player_rooms[player_id] = room.id
        logger.info("match found: %s vs %s in %s", opponent, player_id, room.id)
        return room

    def cancel_matchmaking(self, player_id: str) -> None:
        if player_id in self._waiting:
            self._waiting.remove(player_id)
            logger.info("%s left matchmaking queue", player_id)

    def get_game_room(self, player_id: str) -> Optional[GameRoom]:
        room_id = self._player_rooms.get(player_id)
        if room_id is None:
            return None
        return self._active_games.get(room_id)

    def get_game_room_by_id(self, room_id: str) -> Optional[GameRoom]:
        return self._active_games.get(room_id)

    def end_game(self, room_id: str) -> None:
        room = self._active_games.pop(room_id, None)
        if room is None:
            return
        self._player_rooms.pop(room.game_state.player1.player_id, None)
        self._player_rooms.pop(room.game_state.player2.player_id, None)
        logger.info("game ended: %s", room_id)

    def handle_player_disconnect(self, player_id: str) -> Optional[GameRoom]:
        """Drop a player from the queue; a running game is forfeited and closed."""
        self.cancel_matchmaking(player_id)

        room = self.get_game_room(player_id)
        if room is None:
            return None
        logger.info("%s disconnected from %s", player_id, room.id)
        room.forfeit(player_id)
        self.end_game(room.id)
        return room

    def get_stats(self) -> dict[str, int]:
        return {
            "waiting_players": len(self._waiting),
            "active_games": len(self._active_games),
        }
