"""Replay engine: the game lifecycle around the turn rules."""

from __future__ import annotations

import logging
from typing import Callable

from .config import ReplayConfig
from .game import apply_command, create_game, finish_malformed
from .models import (
    Command,
    FinishReason,
    GamePhase,
    GameResult,
    GameStats,
    GameStatus,
    HandPositionError,
    HanabiState,
    StartGameCommand,
    TurnLog,
)

logger = logging.getLogger(__name__)


class ReplayEngine:
    """Runs one game at a time from a stream of command records.

    Phases: idle (no game yet), active, finished. A start command is
    accepted in every phase and replaces the current game; any other
    command is applied only while a game is active and ignored otherwise.
    """

    def __init__(
        self,
        config: ReplayConfig | None = None,
        on_finish: Callable[[GameResult], None] | None = None,
        on_turn: Callable[[HanabiState, TurnLog], None] | None = None,
    ):
        self.config = config or ReplayConfig()
        self.on_finish = on_finish
        self.on_turn = on_turn
        self.state: HanabiState | None = None
        self.games_started = 0

    @property
    def phase(self) -> GamePhase:
        if self.state is None:
            return GamePhase.IDLE
        return self.state.phase

    def execute(self, command: Command) -> GameStatus:
        """
        Apply one command.

        Raises:
            HandPositionError: the command addressed a missing hand position.
                The game is finished (and reported) before the error propagates.
            ValueError: a start command did not carry enough cards to deal.
        """
        if isinstance(command, StartGameCommand):
            return self._start(command)

        if self.phase != GamePhase.ACTIVE:
            logger.debug(f"Ignoring {command.command_type} command: no active game")
            return GameStatus.FINISH

        try:
            new_state, result, turn_log = apply_command(self.state, command, self.config)
        except HandPositionError as e:
            self.state = finish_malformed(self.state, str(e))
            self._report()
            raise

        self.state = new_state
        if self.on_turn is not None and turn_log is not None:
            self.on_turn(new_state, turn_log)
        if result.status == GameStatus.FINISH:
            self._report()
        return result.status

    def stats(self) -> GameStats:
        if self.state is None:
            return GameStats(turn=0, board_depth=0, risk_count=0)
        return GameStats(
            turn=self.state.turn_number,
            board_depth=self.state.board.depth,
            risk_count=self.state.risk_count,
        )

    def result(self) -> GameResult:
        if self.state is None:
            raise RuntimeError("No game has been started")
        return GameResult(
            game_index=self.games_started - 1,
            stats=self.stats(),
            finish_reason=self.state.finish_reason,
            played_cards=dict(self.state.board.played),
            history=list(self.state.history),
        )

    def abandon(self) -> None:
        """Stop the active game without a rule-driven finish."""
        if self.phase != GamePhase.ACTIVE:
            return
        logger.warning(
            f"Game {self.games_started - 1} cut off after {self.state.turn_number} turns"
        )
        self.state.phase = GamePhase.FINISHED
        self.state.finish_reason = FinishReason.ABANDONED
        if self.config.report_unfinished:
            self._report()

    def _start(self, command: StartGameCommand) -> GameStatus:
        state = create_game(command, self.config)
        self.abandon()
        self.state = state
        self.games_started += 1
        logger.info(
            f"Game {self.games_started - 1} started: "
            f"hands [{state.hands[0]}] / [{state.hands[1]}], {state.deck_size} cards in deck"
        )
        return GameStatus.CONTINUE

    def _report(self) -> None:
        result = self.result()
        logger.info(
            f"Game {result.game_index} finished ({result.finish_reason.value}): "
            f"{result.result_line()}"
        )
        if self.on_finish is not None:
            self.on_finish(result)
