from __future__ import annotations


class GridDuelError(Exception):
    """Base for internal errors."""


class BattlePreconditionError(GridDuelError):
    """resolve_round was called without two complete selections."""


class RoomStateError(GridDuelError):
    """A room operation was attempted in the wrong phase."""


class NarrationError(GridDuelError, ValueError):
    def __init__(self, raw_text: str):
        super().__init__(f"Narrator returned unparseable response:\n{raw_text}")
        self.raw_text = raw_text


class RepositoryError(GridDuelError):
    def __init__(self, table: str, detail: str):
        super().__init__(f"Supabase operation on '{table}' failed: {detail}")
        self.table = table
        self.detail = detail
