"""Tests for replaying whole Hanabi logs, metrics and the CLI."""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from scripts.run_replay import main
from src.hanabi.config import ReplayConfig, config_from_env
from src.hanabi.metrics import compute_game_metrics, score_category, summarize_results
from src.hanabi.models import FinishReason, GameResult, PlayCommand, StartGameCommand
from src.hanabi.parsing import CommandParseError, parse_card
from src.hanabi.replay import replay_commands, replay_lines, write_results


TWO_GAMES = """\
Start new game with deck R1 R2 R3 R4 R5 G1 G2 G3 G4 G5 R1 R2
Play card 0
Play card 0
Play card 0

Start new game with deck R2 R1 R3 R4 R5 G1 G2 G3 G4 G5 B1 B2 B3
Play card 0
Drop card 1
"""

CLUED_GAME = """\
Start new game with deck G1 G2 G3 G4 G5 R1 R2 R3 W4 Y5 B1 B2 B3 B4
Tell color Red for cards 0 1 2
Tell rank 1 for cards 0
Tell rank 1 for cards 0
Play card 0
Drop card 4
Tell color Green for cards 0 1
"""


class TestReplayLines:
    """Tests for driving the engine over log lines."""

    def test_one_line_per_finished_game(self):
        results = replay_lines(TWO_GAMES.splitlines())

        assert [r.result_line() for r in results] == [
            "Turn: 2, cards: 2, with risk: 2",
            "Turn: 1, cards: 0, with risk: 0",
        ]
        assert [r.game_index for r in results] == [0, 1]

    def test_emit_fn_called_per_game(self):
        emitted: list[GameResult] = []
        replay_lines(TWO_GAMES.splitlines(), emit_fn=emitted.append)
        assert len(emitted) == 2

    def test_clued_game(self):
        results = replay_lines(CLUED_GAME.splitlines())

        # Last clue names only two of player 0's four Green cards
        assert len(results) == 1
        result = results[0]
        assert result.finish_reason == FinishReason.UNTRUTHFUL_CLUE
        assert result.result_line() == "Turn: 6, cards: 1, with risk: 0"

    def test_unfinished_game_at_end_of_input(self):
        lines = TWO_GAMES.splitlines()[:2]
        assert replay_lines(lines) == []

        results = replay_lines(lines, ReplayConfig(report_unfinished=True))
        assert len(results) == 1
        assert results[0].finish_reason == FinishReason.ABANDONED

    def test_malformed_line_is_skipped(self, caplog):
        lines = [
            "Start new game with deck R1 R2 R3 R4 R5 G1 G2 G3 G4 G5 R1 R2",
            "Juggle card 0",
            "Play card 0",
            "Play card 0",
        ]
        with caplog.at_level(logging.ERROR):
            results = replay_lines(lines)

        assert results[0].result_line() == "Turn: 2, cards: 2, with risk: 2"
        assert "Line 2" in caplog.text

    def test_malformed_line_raises_when_strict(self):
        lines = ["Start new game with deck R1 R2 R3 R4 R5 G1 G2 G3 G4 G5 R1 R2", "Juggle card 0"]
        with pytest.raises(CommandParseError):
            replay_lines(lines, ReplayConfig(strict=True))

    def test_bad_position_finishes_game(self, caplog):
        lines = [
            "Start new game with deck R1 R2 R3 R4 R5 G1 G2 G3 G4 G5 R1 R2",
            "Play card 0",
            "Drop card 8",
            "Play card 0",
        ]
        with caplog.at_level(logging.ERROR):
            results = replay_lines(lines)

        assert len(results) == 1
        assert results[0].finish_reason == FinishReason.MALFORMED_COMMAND
        assert results[0].result_line() == "Turn: 2, cards: 1, with risk: 1"
        assert "Line 3" in caplog.text

    def test_gameplay_before_first_start_is_ignored(self):
        lines = ["Play card 0", *TWO_GAMES.splitlines()]
        assert len(replay_lines(lines)) == 2

    def test_replay_commands(self):
        commands = [
            StartGameCommand(cards=[parse_card(t) for t in "R1 R2 R3 R4 R5 G1 G2 G3 G4 G5 B1".split()]),
            PlayCommand(card_position=0),
        ]
        results = replay_commands(commands)
        assert results[0].finish_reason == FinishReason.DECK_EXHAUSTED

    def test_write_results(self):
        out = io.StringIO()
        write_results(replay_lines(TWO_GAMES.splitlines()), out)
        assert out.getvalue() == (
            "Turn: 2, cards: 2, with risk: 2\n"
            "Turn: 1, cards: 0, with risk: 0\n"
        )


class TestMetrics:
    """Tests for per-game and aggregate metrics."""

    def test_game_metrics(self):
        result = replay_lines(CLUED_GAME.splitlines())[0]
        metrics = compute_game_metrics(result)

        assert metrics["turns"] == 6
        assert metrics["plays_attempted"] == 1
        assert metrics["plays_successful"] == 1
        assert metrics["risky_plays"] == 0
        assert metrics["safe_play_rate"] == 1.0
        assert metrics["drops"] == 1
        assert metrics["suit_clues"] == 2
        assert metrics["rank_clues"] == 2
        assert metrics["finish_reason"] == "untruthful_clue"
        assert metrics["per_player"][0]["clues"] == 2

    def test_summary(self):
        summary = summarize_results(replay_lines(TWO_GAMES.splitlines()))

        assert summary["games"] == 2
        assert summary["mean_turns"] == 1.5
        assert summary["mean_board_depth"] == 1.0
        assert summary["total_risk"] == 2
        assert summary["perfect_games"] == 0
        assert summary["finish_reasons"] == {"deck_exhausted": 1, "misplay": 1}

    def test_empty_summary(self):
        assert summarize_results([])["games"] == 0

    def test_score_category(self):
        assert score_category(25) == "perfect"
        assert score_category(2) == "terrible"


class TestConfig:
    """Tests for configuration loading."""

    def test_defaults(self):
        config = ReplayConfig()
        assert config.hand_size == 5
        assert config.min_deck_after_drop == 2
        assert not config.report_unfinished

    def test_two_players_only(self):
        with pytest.raises(ValueError):
            ReplayConfig(num_players=3)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("HANABI_MIN_DECK_AFTER_DROP", "1")
        monkeypatch.setenv("HANABI_REPORT_UNFINISHED", "true")
        config = config_from_env()

        assert config.min_deck_after_drop == 1
        assert config.report_unfinished

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("HANABI_HAND_SIZE", "4")
        config = config_from_env(hand_size=3, strict=None)

        assert config.hand_size == 3
        assert not config.strict


class TestCli:
    """Tests for the run_replay script."""

    def test_writes_result_lines(self, tmp_path: Path):
        log = tmp_path / "games.txt"
        log.write_text(TWO_GAMES)
        out = tmp_path / "results.txt"

        assert main([str(log), "-o", str(out), "-q"]) == 0
        assert out.read_text().splitlines() == [
            "Turn: 2, cards: 2, with risk: 2",
            "Turn: 1, cards: 0, with risk: 0",
        ]

    def test_summary_goes_to_stderr(self, tmp_path: Path, capsys):
        log = tmp_path / "games.txt"
        log.write_text(TWO_GAMES)

        main([str(log), "--summary", "-q"])
        captured = capsys.readouterr()

        assert "Turn: 2, cards: 2, with risk: 2" in captured.out
        assert '"games": 2' in captured.err

    def test_trace_logs_both_views_every_turn(self, tmp_path: Path, caplog):
        log = tmp_path / "games.txt"
        log.write_text(
            "Start new game with deck R1 R2 R3 R4 R5 G1 G2 G3 G4 G5 B1 B2 B3 B4\n"
            "Play card 0\n"
            "Play card 0\n"
            "Play card 1\n"
        )

        with caplog.at_level(logging.INFO):
            main([str(log), "--trace", "-o", str(tmp_path / "out.txt")])

        views = [
            json.loads(record.getMessage())
            for record in caplog.records
            if record.getMessage().startswith("{")
        ]
        assert [(v["turn_number"], v["player_idx"]) for v in views] == [
            (1, 0), (1, 1), (2, 0), (2, 1), (3, 0), (3, 1),
        ]
        assert [v["game_over"] for v in views[::2]] == [False, False, True]
