"""Tests for parsing Hanabi log lines."""

import pytest
from src.hanabi.models import (
    Card,
    ClueRankCommand,
    ClueSuitCommand,
    DropCommand,
    PlayCommand,
    StartGameCommand,
)
from src.hanabi.parsing import (
    CommandParseError,
    format_command,
    parse_card,
    parse_command,
)


class TestParseCard:
    """Tests for card tokens."""

    def test_parses_every_suit_letter(self):
        assert [parse_card(t).suit for t in ["R1", "G1", "B1", "W1", "Y1"]] == [
            "Red", "Green", "Blue", "White", "Yellow",
        ]

    def test_parses_rank(self):
        assert parse_card("W4") == Card(suit="White", rank=4)

    @pytest.mark.parametrize("token", ["X1", "R0", "R6", "R", "R12", "r1", "1R"])
    def test_rejects_bad_tokens(self, token):
        with pytest.raises(CommandParseError):
            parse_card(token)


class TestParseCommand:
    """Tests for full command lines."""

    def test_start_game(self):
        line = "Start new game with deck R1 R2 R3 R4 R5 G1 G2 G3 G4 G5 B1 W2"
        command = parse_command(line)

        assert isinstance(command, StartGameCommand)
        assert len(command.cards) == 12
        assert str(command.cards[0]) == "R1"
        assert str(command.cards[-1]) == "W2"

    def test_play(self):
        command = parse_command("Play card 3")
        assert command == PlayCommand(card_position=3)

    def test_drop(self):
        command = parse_command("Drop card 0\n")
        assert command == DropCommand(card_position=0)

    def test_tell_color(self):
        command = parse_command("Tell color Red for cards 0 1 2")
        assert command == ClueSuitCommand(suit="Red", card_positions=[0, 1, 2])

    def test_tell_color_keeps_claimed_order(self):
        command = parse_command("Tell color Blue for cards 4 1")
        assert command.card_positions == [4, 1]

    def test_tell_color_case_insensitive(self):
        command = parse_command("Tell color yellow for cards 4")
        assert command.suit == "Yellow"

    def test_tell_rank(self):
        command = parse_command("Tell rank 1 for cards 2 4")
        assert command == ClueRankCommand(rank=1, card_positions=[2, 4])

    def test_negative_position_is_parsed(self):
        """Range checks belong to the hand, not the parser."""
        assert parse_command("Play card -1") == PlayCommand(card_position=-1)

    @pytest.mark.parametrize("line", [
        "",
        "   ",
        "Hello there",
        "Play card",
        "Play card x",
        "Drop card 1 2",
        "Tell color Purple for cards 0",
        "Tell rank 6 for cards 0",
        "Tell rank one for cards 0",
        "Start new game with deck R1 Q2",
    ])
    def test_rejects_malformed_lines(self, line):
        with pytest.raises(CommandParseError):
            parse_command(line)

    def test_error_carries_line(self):
        with pytest.raises(CommandParseError) as excinfo:
            parse_command("Tell color Purple for cards 0")
        assert excinfo.value.line == "Tell color Purple for cards 0"
        assert "Purple" in str(excinfo.value)


class TestFormatCommand:
    """Tests for rendering commands back to log lines."""

    @pytest.mark.parametrize("line", [
        "Start new game with deck R1 G2 B3",
        "Play card 2",
        "Drop card 4",
        "Tell color White for cards 0 3",
        "Tell rank 5 for cards 1",
    ])
    def test_format_matches_log_line(self, line):
        assert format_command(parse_command(line)) == line
