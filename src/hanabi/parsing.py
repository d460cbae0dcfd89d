"""Parsing of Hanabi game log lines into command records."""

from __future__ import annotations

import re

from .models import (
    Card,
    ClueRankCommand,
    ClueSuitCommand,
    Command,
    DropCommand,
    PlayCommand,
    RANKS,
    StartGameCommand,
    SUIT_LETTERS,
    SUITS,
)


class CommandParseError(ValueError):
    """A log line could not be decoded into a command."""

    def __init__(self, message: str, line: str | None = None):
        super().__init__(message)
        self.line = line


START_RE = re.compile(r"^Start new game with deck((?:\s+\S+)*)\s*$")
PLAY_RE = re.compile(r"^Play card\s+(\S+)\s*$")
DROP_RE = re.compile(r"^Drop card\s+(\S+)\s*$")
CLUE_RE = re.compile(r"^Tell (color|rank)\s+(\S+)\s+for cards((?:\s+\S+)*)\s*$")

CARD_RE = re.compile(r"^([A-Z])([0-9])$")


def parse_card(token: str) -> Card:
    """Parse a card token such as "R1" (suit letter + rank digit)."""
    match = CARD_RE.match(token)
    if not match:
        raise CommandParseError(f"Invalid card token: {token!r}")

    letter, digit = match.groups()
    suit = SUIT_LETTERS.get(letter)
    if suit is None:
        raise CommandParseError(f"Unknown suit letter in card {token!r}")

    rank = int(digit)
    if rank not in RANKS:
        raise CommandParseError(f"Rank out of range in card {token!r}")

    return Card(suit=suit, rank=rank)  # type: ignore[arg-type]


def _parse_position(token: str) -> int:
    if not re.fullmatch(r"-?\d+", token):
        raise CommandParseError(f"Invalid card position: {token!r}")
    return int(token)


def _parse_suit(token: str) -> str:
    for suit in SUITS:
        if suit.lower() == token.lower():
            return suit
    raise CommandParseError(f"Unknown suit: {token!r}")


def _parse_rank(token: str) -> int:
    if not token.isdigit() or int(token) not in RANKS:
        raise CommandParseError(f"Invalid rank: {token!r}")
    return int(token)


def parse_command(line: str) -> Command:
    """
    Parse one log line into a command record.

    Recognized forms:
        Start new game with deck R1 G2 ...
        Play card 0
        Drop card 3
        Tell color Red for cards 0 2
        Tell rank 1 for cards 1 4

    Raises:
        CommandParseError: the line is blank, unrecognized, or carries a bad token
    """
    text = line.strip()
    if not text:
        raise CommandParseError("Empty command line", line)

    try:
        match = START_RE.match(text)
        if match:
            return StartGameCommand(cards=[parse_card(t) for t in match.group(1).split()])

        match = PLAY_RE.match(text)
        if match:
            return PlayCommand(card_position=_parse_position(match.group(1)))

        match = DROP_RE.match(text)
        if match:
            return DropCommand(card_position=_parse_position(match.group(1)))

        match = CLUE_RE.match(text)
        if match:
            clue_type, value, positions_text = match.groups()
            positions = [_parse_position(t) for t in positions_text.split()]
            if clue_type == "color":
                return ClueSuitCommand(suit=_parse_suit(value), card_positions=positions)  # type: ignore[arg-type]
            return ClueRankCommand(rank=_parse_rank(value), card_positions=positions)  # type: ignore[arg-type]
    except CommandParseError as e:
        raise CommandParseError(f"{e} in line {text!r}", line) from e

    raise CommandParseError(f"Unrecognized command: {text!r}", line)


def format_command(command: Command) -> str:
    """Render a command record back to its log line."""
    if isinstance(command, StartGameCommand):
        return " ".join(["Start new game with deck", *(str(c) for c in command.cards)])
    if isinstance(command, PlayCommand):
        return f"Play card {command.card_position}"
    if isinstance(command, DropCommand):
        return f"Drop card {command.card_position}"
    if isinstance(command, ClueSuitCommand):
        positions = " ".join(str(p) for p in command.card_positions)
        return f"Tell color {command.suit} for cards {positions}".rstrip()
    if isinstance(command, ClueRankCommand):
        positions = " ".join(str(p) for p in command.card_positions)
        return f"Tell rank {command.rank} for cards {positions}".rstrip()
    raise TypeError(f"Unknown command type: {type(command).__name__}")
