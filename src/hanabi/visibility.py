"""Player views of a replayed game.

A player sees the other player's hand but NOT their own cards. What they
know about their own cards comes only from the clues they received.
"""

from __future__ import annotations

from typing import Any

from .models import HanabiState


# Keys that must NEVER appear in any player view
FORBIDDEN_KEYS = {
    "deck",
    "deck_cards",
    "history",
    "my_hand",
    "own_hand",
}


def _knowledge_entry(knowledge) -> dict[str, Any]:
    data = knowledge.model_dump()
    data["possible_cards"] = [str(c) for c in knowledge.possible_cards()]
    return data


def view_for_player(state: HanabiState, player_idx: int) -> dict[str, Any]:
    """
    Build the redacted game state view for one player.

    Args:
        state: Current game state
        player_idx: The player requesting the view

    Returns:
        View dictionary safe for the player to see
    """
    if player_idx < 0 or player_idx >= len(state.hands):
        raise ValueError(f"Unknown player: {player_idx}")

    visible_hands: dict[int, list[str]] = {
        idx: describe_hand_for_others(state, idx)
        for idx in range(len(state.hands))
        if idx != player_idx
    }

    my_hand_knowledge = [
        _knowledge_entry(held.knowledge)
        for held in state.hands[player_idx].cards
    ]

    return {
        "player_idx": player_idx,
        "turn_number": state.turn_number,

        # Other player's hand - VISIBLE
        "visible_hands": visible_hands,

        # Own hand - only knowledge from clues
        "my_hand_knowledge": my_hand_knowledge,
        "my_hand_size": len(state.hands[player_idx]),

        # Public game state
        "played_cards": dict(state.board.played),
        "score": state.score,
        "deck_remaining": state.deck_size,
        "risk_count": state.risk_count,

        "current_player": state.current_player_idx,
        "is_my_turn": state.current_player_idx == player_idx,
        "game_over": state.game_over,
    }


def describe_hand_for_others(state: HanabiState, player_idx: int) -> list[str]:
    """Describe a player's hand as the other player sees it."""
    return [str(held) for held in state.hands[player_idx].cards]


def _find_card_tokens(payload: Any, tokens: set[str], path: str = "") -> list[str]:
    """Paths in a payload where any of `tokens` appears as a key or value."""
    found: list[str] = []
    if isinstance(payload, dict):
        for key, value in payload.items():
            current_path = f"{path}.{key}" if path else str(key)
            if str(key) in tokens:
                found.append(current_path)
            found.extend(_find_card_tokens(value, tokens, current_path))
    elif isinstance(payload, (list, tuple, set)):
        for i, item in enumerate(payload):
            found.extend(_find_card_tokens(item, tokens, f"{path}[{i}]"))
    elif isinstance(payload, str) and payload in tokens:
        found.append(path)
    return found


def assert_no_leaks(
    payload: Any,
    state: HanabiState | None = None,
    player_idx: int | None = None,
) -> None:
    """
    Assert that a payload carries nothing a player must not see.

    Always checks for forbidden keys. Given the game state and the viewing
    player, also checks that the viewer's own card tokens appear nowhere
    except as possibilities in my_hand_knowledge, and that every visible
    hand is exactly another player's real hand.

    Raises AssertionError if any leak is detected.
    """
    _assert_no_forbidden_keys(payload)
    if state is None or player_idx is None:
        return
    if not isinstance(payload, dict):
        return

    own_tokens = set(describe_hand_for_others(state, player_idx))

    for idx, cards in payload.get("visible_hands", {}).items():
        if idx == player_idx or idx not in range(len(state.hands)) or cards != describe_hand_for_others(state, idx):
            raise AssertionError(f"visible_hands[{idx}] is not another player's real hand - LEAK!")

    redacted = {k: v for k, v in payload.items() if k not in ("visible_hands", "my_hand_knowledge")}
    redacted["my_hand_knowledge"] = [
        {k: v for k, v in entry.items() if k != "possible_cards"} if isinstance(entry, dict) else entry
        for entry in payload.get("my_hand_knowledge", [])
    ]
    leaks = _find_card_tokens(redacted, own_tokens)
    if leaks:
        raise AssertionError(f"Player {player_idx}'s own cards found at {', '.join(leaks)} - LEAK!")


def _assert_no_forbidden_keys(payload: Any, path: str = "") -> None:
    if isinstance(payload, dict):
        for key, value in payload.items():
            current_path = f"{path}.{key}" if path else str(key)
            if str(key).lower() in FORBIDDEN_KEYS:
                raise AssertionError(f"Forbidden key '{key}' found at {current_path}")
            _assert_no_forbidden_keys(value, current_path)

    elif isinstance(payload, list):
        for i, item in enumerate(payload):
            _assert_no_forbidden_keys(item, f"{path}[{i}]")


def assert_view_safe(view: dict[str, Any], state: HanabiState | None = None) -> None:
    """
    Validate that a player view carries no information about the viewer's own cards.

    Checks:
    1. No forbidden keys anywhere in the payload
    2. The viewer's own hand is not among the visible hands
    3. Own-hand entries hold knowledge only, never a card identity
    4. With the state given, the viewer's real card tokens appear nowhere else
    """
    if not isinstance(view, dict):
        raise AssertionError("View must be a dictionary")

    player_idx = view.get("player_idx")
    if player_idx is None:
        raise AssertionError("View missing player_idx")

    if player_idx in view.get("visible_hands", {}):
        raise AssertionError(f"Player {player_idx}'s own hand found in visible_hands - LEAK!")

    allowed_keys = {"possible_suits", "possible_ranks", "possible_cards"}
    for i, entry in enumerate(view.get("my_hand_knowledge", [])):
        extra_keys = set(entry) - allowed_keys
        if extra_keys:
            raise AssertionError(f"Unexpected keys {sorted(extra_keys)} in my_hand_knowledge[{i}] - LEAK!")

    assert_no_leaks(view, state, player_idx)
