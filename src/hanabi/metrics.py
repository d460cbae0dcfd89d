"""Metrics calculation for replayed Hanabi games."""

from __future__ import annotations

from collections import Counter
from typing import Any

from .models import (
    ClueRankCommand,
    ClueSuitCommand,
    DropCommand,
    GameResult,
    MAX_SCORE,
    PlayCommand,
)


def compute_game_metrics(result: GameResult) -> dict[str, Any]:
    """
    Compute metrics for one replayed game.

    Returns dict with:
    - turns, board_depth, risk_count: the summary line counters
    - plays_attempted / plays_successful / risky_plays
    - drops, suit_clues, rank_clues
    - safe_play_rate: share of successful plays that were not risky
    - per_player: per-player breakdown
    """
    plays_attempted = 0
    plays_successful = 0
    risky_plays = 0
    drops = 0
    suit_clues = 0
    rank_clues = 0

    per_player: dict[int, dict[str, int]] = {}

    for turn in result.history:
        counts = per_player.setdefault(turn.player_idx, {
            "plays": 0,
            "drops": 0,
            "clues": 0,
        })

        command = turn.command
        if isinstance(command, PlayCommand):
            plays_attempted += 1
            counts["plays"] += 1
            if turn.result.was_playable:
                plays_successful += 1
            if turn.result.was_risky:
                risky_plays += 1
        elif isinstance(command, DropCommand):
            drops += 1
            counts["drops"] += 1
        elif isinstance(command, ClueSuitCommand):
            suit_clues += 1
            counts["clues"] += 1
        elif isinstance(command, ClueRankCommand):
            rank_clues += 1
            counts["clues"] += 1

    safe_plays = plays_successful - risky_plays

    return {
        "turns": result.stats.turn,
        "board_depth": result.stats.board_depth,
        "risk_count": result.stats.risk_count,
        "finish_reason": result.finish_reason.value if result.finish_reason else None,
        "score_category": score_category(result.stats.board_depth),

        "plays_attempted": plays_attempted,
        "plays_successful": plays_successful,
        "risky_plays": risky_plays,
        "drops": drops,
        "suit_clues": suit_clues,
        "rank_clues": rank_clues,

        "safe_play_rate": round(safe_plays / plays_successful, 3) if plays_successful > 0 else 0.0,
        "stacks_completed": sum(1 for v in result.played_cards.values() if v == 5),
        "per_player": per_player,
    }


def summarize_results(results: list[GameResult]) -> dict[str, Any]:
    """Aggregate counters over many replayed games."""
    games = len(results)
    if games == 0:
        return {
            "games": 0,
            "mean_turns": 0.0,
            "mean_board_depth": 0.0,
            "total_risk": 0,
            "perfect_games": 0,
            "finish_reasons": {},
        }

    reasons = Counter(r.finish_reason.value if r.finish_reason else "unknown" for r in results)

    return {
        "games": games,
        "mean_turns": round(sum(r.stats.turn for r in results) / games, 2),
        "mean_board_depth": round(sum(r.stats.board_depth for r in results) / games, 2),
        "total_risk": sum(r.stats.risk_count for r in results),
        "perfect_games": sum(1 for r in results if r.stats.board_depth == MAX_SCORE),
        "finish_reasons": dict(reasons),
    }


def score_category(score: int) -> str:
    """Categorize a Hanabi score."""
    if score == 25:
        return "perfect"
    elif score >= 21:
        return "excellent"
    elif score >= 16:
        return "good"
    elif score >= 11:
        return "mediocre"
    elif score >= 6:
        return "poor"
    else:
        return "terrible"
