"""Drive the replay engine over a stream of log lines or commands."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, TextIO

from .config import ReplayConfig
from .engine import ReplayEngine
from .models import Command, GameResult, HandPositionError
from .parsing import CommandParseError, parse_command

logger = logging.getLogger(__name__)


def replay_commands(
    commands: Iterable[Command],
    config: ReplayConfig | None = None,
    emit_fn: Callable[[GameResult], None] | None = None,
    engine: ReplayEngine | None = None,
) -> list[GameResult]:
    """
    Replay already-parsed commands.

    Args:
        commands: Command records in log order
        config: Replay configuration
        emit_fn: Optional callback called once per reported game
        engine: Optional engine to drive (created if not provided)

    Returns:
        Results of every reported game, in order
    """
    return _replay(((None, command) for command in commands), config, emit_fn, engine)


def replay_lines(
    lines: Iterable[str],
    config: ReplayConfig | None = None,
    emit_fn: Callable[[GameResult], None] | None = None,
    engine: ReplayEngine | None = None,
) -> list[GameResult]:
    """
    Parse and replay log lines. Blank lines are skipped.

    Malformed lines are logged and skipped unless config.strict is set,
    in which case the CommandParseError propagates.
    """
    config = config or ReplayConfig()

    def commands():
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                yield line_number, parse_command(line)
            except CommandParseError as e:
                if config.strict:
                    raise
                logger.error(f"Line {line_number}: {e}")

    return _replay(commands(), config, emit_fn, engine)


def _replay(
    numbered_commands: Iterable[tuple[int | None, Command]],
    config: ReplayConfig | None,
    emit_fn: Callable[[GameResult], None] | None,
    engine: ReplayEngine | None,
) -> list[GameResult]:
    config = config or ReplayConfig()
    results: list[GameResult] = []

    def on_finish(result: GameResult) -> None:
        results.append(result)
        if emit_fn is not None:
            emit_fn(result)

    if engine is None:
        engine = ReplayEngine(config)
    engine.on_finish = on_finish

    for line_number, command in numbered_commands:
        where = f"Line {line_number}" if line_number is not None else f"Command {command.command_type}"
        try:
            engine.execute(command)
        except (HandPositionError, ValueError) as e:
            if config.strict:
                raise
            logger.error(f"{where}: {e}")

    engine.abandon()
    return results


def write_results(results: Iterable[GameResult], stream: TextIO) -> None:
    """Write one summary line per game."""
    for result in results:
        stream.write(result.result_line() + "\n")
