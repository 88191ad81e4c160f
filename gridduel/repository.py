"""
Grid Duel — Supabase Repository Layer
All database operations in one place. No table access outside this file.

Usage:
    from gridduel.repository import GridDuelRepository
    repo = GridDuelRepository(supabase_url, supabase_key)

    match_id = await repo.create_match(room)
    await repo.save_round(match_id, room.game_state.round, outcome)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from supabase import Client, create_client
from .battle_log import character_to_wire, events_to_wire
from .errors import RepositoryError
from .models import GameResult, RoundOutcome
from .room import GameRoom

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Transfer Objects
# ---------------------------------------------------------------------------

@dataclass
class MatchSummary:
    id: str
    player1_id: str
    player2_id: str
    status: str
    current_round: int
    result: Optional[GameResult]
    winner_id: Optional[str]
    created_at: Optional[str]
    completed_at: Optional[str]


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class GridDuelRepository:

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        client: Optional[Client] = None,
    ):
        if client is None:
            if not (supabase_url and supabase_key):
                raise ValueError("supabase_url and supabase_key are required without a client")
            client = create_client(supabase_url, supabase_key)
        self.client: Client = client

    # -----------------------------------------------------------------------
    # MATCHES
    # -----------------------------------------------------------------------

    async def create_match(self, room: GameRoom) -> str:
        """Insert the match row for a freshly paired room. Returns the match id."""
        state = room.game_state
        self._execute("matches", self.client.table("matches").insert({
            "id": room.id,
            "player1_id": state.player1.player_id,
            "player2_id": state.player2.player_id,
            "status": "active",
            "current_round": state.round,
            "started_at": _now(),
        }))
        logger.info("match %s stored", room.id)
        return room.id

    async def get_match(self, match_id: str) -> Optional[MatchSummary]:
        result = self._execute(
            "matches",
            self.client.table("matches").select("*").eq("id", match_id).limit(1),
        )
        if not result.data:
            return None
        return self._row_to_match_summary(result.data[0])

    async def complete_match(self, match_id: str, result: GameResult, winner_id: Optional[str]) -> None:
        """Mark a match as finished with its result."""
        self._execute("matches", self.client.table("matches").update({
            "status": "draw" if result == GameResult.DRAW else "completed",
            "result": result.value,
            "winner_id": winner_id,
            "completed_at": _now(),
        }).eq("id", match_id))

    # -----------------------------------------------------------------------
    # MATCH ROUNDS
    # -----------------------------------------------------------------------

    async def save_round(self, match_id: str, round_number: int, outcome: RoundOutcome) -> str:
        """Save a resolved round: the replay log and both characters afterwards."""
        result = self._execute("match_rounds", self.client.table("match_rounds").insert({
            "match_id": match_id,
            "round_number": round_number,
            "events": events_to_wire(outcome.events),
            "player1_state": character_to_wire(outcome.player1),
            "player2_state": character_to_wire(outcome.player2),
            "result": outcome.result.value if outcome.result else None,
        }))
        self._execute("matches", self.client.table("matches").update({
            "current_round": round_number,
        }).eq("id", match_id))
        return result.data[0]["id"]

    async def get_match_rounds(self, match_id: str) -> list[dict]:
        """All rounds for a match, ordered by round number."""
        result = self._execute(
            "match_rounds",
            self.client.table("match_rounds").select("*").eq("match_id", match_id).order("round_number"),
        )
        return result.data or []

    # -----------------------------------------------------------------------
    # Private helpers
    # -----------------------------------------------------------------------

    def _execute(self, table: str, query):
        try:
            return query.execute()
        except Exception as exc:
            raise RepositoryError(table, str(exc)) from exc

    def _row_to_match_summary(self, row: dict) -> MatchSummary:
        raw_result = row.get("result")
        return MatchSummary(
            id=row["id"],
            player1_id=row["player1_id"],
            player2_id=row["player2_id"],
            status=row["status"],
            current_round=row["current_round"],
            result=GameResult(raw_result) if raw_result else None,
            winner_id=row.get("winner_id"),
            created_at=row.get("created_at"),
            completed_at=row.get("completed_at"),
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
