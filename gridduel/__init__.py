"""Grid Duel Battle Engine"""

from .cards import CARD_DEFINITIONS, DEFAULT_DECK, definition_of
from .matchmaking import MatchmakingService
from .models import BattleEvent, CardKind, CharacterState, GameResult, Position, RoundOutcome
from .room import GameRoom
from .rules import create_character, create_new_game, resolve_round, validate_selection

__all__ = [
    'CARD_DEFINITIONS', 'DEFAULT_DECK', 'definition_of',
    'BattleEvent', 'CardKind', 'CharacterState', 'GameResult', 'Position', 'RoundOutcome',
    'GameRoom', 'MatchmakingService',
    'create_character', 'create_new_game', 'resolve_round', 'validate_selection',
]
