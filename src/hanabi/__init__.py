"""Hanabi log replay: turn engine and card-knowledge model."""

from .models import (
    Card,
    CardKnowledge,
    HeldCard,
    Board,
    Deck,
    Hand,
    HandPositionError,
    DeckEmptyError,
    StartGameCommand,
    PlayCommand,
    DropCommand,
    ClueSuitCommand,
    ClueRankCommand,
    Command,
    GameStatus,
    GamePhase,
    FinishReason,
    ActionResult,
    TurnLog,
    HanabiState,
    GameStats,
    GameResult,
)
from .config import ReplayConfig, config_from_env
from .game import (
    create_game,
    apply_command,
    is_playable,
)
from .engine import ReplayEngine
from .parsing import CommandParseError, parse_card, parse_command, format_command
from .replay import replay_commands, replay_lines, write_results
from .metrics import compute_game_metrics, summarize_results
from .visibility import (
    view_for_player,
    assert_no_leaks,
    assert_view_safe,
)

__all__ = [
    # Models
    "Card",
    "CardKnowledge",
    "HeldCard",
    "Board",
    "Deck",
    "Hand",
    "HandPositionError",
    "DeckEmptyError",
    "StartGameCommand",
    "PlayCommand",
    "DropCommand",
    "ClueSuitCommand",
    "ClueRankCommand",
    "Command",
    "GameStatus",
    "GamePhase",
    "FinishReason",
    "ActionResult",
    "TurnLog",
    "HanabiState",
    "GameStats",
    "GameResult",
    # Config
    "ReplayConfig",
    "config_from_env",
    # Game
    "create_game",
    "apply_command",
    "is_playable",
    "ReplayEngine",
    # Parsing
    "CommandParseError",
    "parse_card",
    "parse_command",
    "format_command",
    # Replay
    "replay_commands",
    "replay_lines",
    "write_results",
    # Metrics
    "compute_game_metrics",
    "summarize_results",
    # Visibility
    "view_for_player",
    "assert_no_leaks",
    "assert_view_safe",
]
