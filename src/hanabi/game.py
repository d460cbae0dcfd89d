"""Core game rules for replaying Hanabi logs."""

from __future__ import annotations

import logging

from .config import ReplayConfig
from .models import (
    ActionResult,
    Board,
    Card,
    ClueRankCommand,
    ClueSuitCommand,
    Deck,
    DropCommand,
    FinishReason,
    GamePhase,
    GameStatus,
    Hand,
    HanabiState,
    PlayCommand,
    StartGameCommand,
    TurnLog,
)

logger = logging.getLogger(__name__)


def create_game(command: StartGameCommand, config: ReplayConfig | None = None) -> HanabiState:
    """
    Deal a new game from a start command.

    The first `hand_size` cards go to player 0, the next `hand_size` to
    player 1 and the rest form the deck, all in list order.
    """
    config = config or ReplayConfig()
    cards = list(command.cards)
    dealt = config.hand_size * config.num_players

    if len(cards) < dealt:
        raise ValueError(
            f"Start command needs at least {dealt} cards, got {len(cards)}"
        )

    hands: list[Hand] = []
    for i in range(config.num_players):
        hand = Hand()
        for card in cards[i * config.hand_size:(i + 1) * config.hand_size]:
            hand.add_card(card)
        hands.append(hand)

    return HanabiState(
        hands=hands,
        board=Board(),
        deck=Deck(cards=cards[dealt:]),
        current_player_idx=0,
        turn_number=0,
        risk_count=0,
        phase=GamePhase.ACTIVE,
    )


def is_playable(card: Card, board: Board) -> bool:
    """Check if a card can be legally played."""
    return board.can_play(card)


def next_player_idx(state: HanabiState) -> int:
    return (state.current_player_idx + 1) % len(state.hands)


def _copy_state(state: HanabiState) -> HanabiState:
    """Deep copy a state except its turn logs, which the copy shares."""
    history = state.history
    new_state = state.model_copy(update={"history": []}).model_copy(deep=True)
    new_state.history = list(history)
    return new_state


def _finish(message: str, reason: FinishReason, **kwargs) -> ActionResult:
    return ActionResult(
        status=GameStatus.FINISH,
        message=message,
        finish_reason=reason,
        **kwargs,
    )


def apply_play(state: HanabiState, command: PlayCommand) -> tuple[HanabiState, ActionResult]:
    """Apply a play command for the current player."""
    new_state = _copy_state(state)
    hand = new_state.current_hand

    # Knowledge is judged before the card leaves the hand
    risky = hand.is_risky(command.card_position, new_state.board)
    held = hand.play_card(command.card_position)
    card = held.card

    if not is_playable(card, new_state.board):
        needed = new_state.board.played[card.suit] + 1
        return new_state, _finish(
            f"Played {card} but it was not playable (needed {card.suit[0]}{needed})",
            FinishReason.MISPLAY,
            card=card,
            was_playable=False,
        )

    if risky:
        new_state.risk_count += 1
    new_state.board.add_card(card)

    if not new_state.deck.is_empty():
        hand.add_card(new_state.deck.draw())

    if new_state.deck.is_empty():
        return new_state, _finish(
            f"Played {card}; the deck is exhausted",
            FinishReason.DECK_EXHAUSTED,
            card=card,
            was_playable=True,
            was_risky=risky,
        )

    return new_state, ActionResult(
        status=GameStatus.CONTINUE,
        message=f"Played {card} successfully" + (" (risky)" if risky else ""),
        card=card,
        was_playable=True,
        was_risky=risky,
    )


def apply_drop(
    state: HanabiState,
    command: DropCommand,
    config: ReplayConfig | None = None,
) -> tuple[HanabiState, ActionResult]:
    """Apply a drop (discard) command for the current player."""
    config = config or ReplayConfig()
    new_state = _copy_state(state)
    hand = new_state.current_hand

    card = hand.drop_card(command.card_position).card

    if new_state.deck.is_empty() or len(new_state.deck) < config.min_deck_after_drop:
        return new_state, _finish(
            f"Dropped {card} with {len(new_state.deck)} card(s) left in the deck",
            FinishReason.DECK_RESERVE,
            card=card,
        )

    hand.add_card(new_state.deck.draw())

    return new_state, ActionResult(
        status=GameStatus.CONTINUE,
        message=f"Dropped {card}",
        card=card,
    )


def apply_clue(
    state: HanabiState,
    command: ClueSuitCommand | ClueRankCommand,
) -> tuple[HanabiState, ActionResult]:
    """
    Apply a suit or rank clue from the current player to the next one.

    The clue is accepted only when the claimed positions are exactly the
    positions (in hand order) whose real cards match the clue.
    """
    new_state = _copy_state(state)
    target = new_state.hands[next_player_idx(new_state)]

    if isinstance(command, ClueSuitCommand):
        value: str | int = command.suit
        matched = target.positions_matching_suit(command.suit)
    else:
        value = command.rank
        matched = target.positions_matching_rank(command.rank)

    claimed = list(command.card_positions)
    if matched != claimed:
        return new_state, _finish(
            f"Clue {value} for cards {claimed} is untruthful (matching cards: {matched})",
            FinishReason.UNTRUTHFUL_CLUE,
            positions_matched=matched,
        )

    if isinstance(command, ClueSuitCommand):
        target.apply_hint_suit(claimed, command.suit)
    else:
        target.apply_hint_rank(claimed, command.rank)

    return new_state, ActionResult(
        status=GameStatus.CONTINUE,
        message=f"Told {value} for cards {claimed}",
        positions_matched=matched,
    )


def apply_command(
    state: HanabiState,
    command: PlayCommand | DropCommand | ClueSuitCommand | ClueRankCommand,
    config: ReplayConfig | None = None,
) -> tuple[HanabiState, ActionResult, TurnLog | None]:
    """
    Apply a gameplay command to the game state.

    Every accepted command is one turn and hands the turn to the other
    player. A clue targets the player who acts next.

    Returns:
        (new_state, result, turn_log); turn_log is None for ignored commands
    """
    if state.game_over:
        return state, ActionResult(
            status=GameStatus.FINISH,
            message="Game is already over",
            finish_reason=state.finish_reason,
        ), None

    player_idx = state.current_player_idx

    if isinstance(command, PlayCommand):
        new_state, result = apply_play(state, command)
    elif isinstance(command, DropCommand):
        new_state, result = apply_drop(state, command, config)
    elif isinstance(command, (ClueSuitCommand, ClueRankCommand)):
        new_state, result = apply_clue(state, command)
    else:
        raise TypeError(f"Unknown command type: {type(command).__name__}")

    new_state.turn_number += 1
    new_state.current_player_idx = next_player_idx(new_state)

    if result.status == GameStatus.FINISH:
        new_state.phase = GamePhase.FINISHED
        new_state.finish_reason = result.finish_reason

    turn_log = TurnLog(
        turn_number=new_state.turn_number,
        player_idx=player_idx,
        command=command,
        result=result,
        score_after=new_state.score,
        deck_size_after=new_state.deck_size,
        risk_count_after=new_state.risk_count,
    )
    new_state.history.append(turn_log)

    logger.debug(f"Turn {turn_log.turn_number} (player {player_idx}): {result.message}")

    return new_state, result, turn_log


def finish_malformed(state: HanabiState, message: str) -> HanabiState:
    """End a game whose command addressed a missing hand position."""
    new_state = _copy_state(state)
    new_state.turn_number += 1
    new_state.phase = GamePhase.FINISHED
    new_state.finish_reason = FinishReason.MALFORMED_COMMAND
    logger.debug(f"Turn {new_state.turn_number}: {message}")
    return new_state
