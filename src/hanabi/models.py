"""Data models for the Hanabi replay engine."""

from __future__ import annotations

from enum import Enum
from itertools import product
from typing import Any, Literal

from pydantic import BaseModel, Field


# Card suits and ranks
Suit = Literal["Red", "Green", "Blue", "White", "Yellow"]
Rank = Literal[1, 2, 3, 4, 5]

SUITS: list[Suit] = ["Red", "Green", "Blue", "White", "Yellow"]
RANKS: list[Rank] = [1, 2, 3, 4, 5]

# Single-letter codes used by card tokens in game logs (R1, G5, ...)
SUIT_LETTERS: dict[str, Suit] = {suit[0]: suit for suit in SUITS}

MAX_SCORE = len(SUITS) * RANKS[-1]


class HandPositionError(IndexError):
    """A command addressed a hand position that does not exist."""


class DeckEmptyError(IndexError):
    """Tried to draw from an empty deck."""


class Card(BaseModel):
    """A card identity: suit and rank. Never mutated once created."""

    model_config = {"frozen": True}

    suit: Suit
    rank: Rank

    def __str__(self) -> str:
        return f"{self.suit[0]}{self.rank}"


class CardKnowledge(BaseModel):
    """What a player can still believe about one of their own cards."""

    possible_suits: set[Suit] = Field(default_factory=lambda: set(SUITS))
    possible_ranks: set[Rank] = Field(default_factory=lambda: set(RANKS))

    def is_known_suit(self) -> bool:
        return len(self.possible_suits) == 1

    def is_known_rank(self) -> bool:
        return len(self.possible_ranks) == 1

    def is_known(self) -> bool:
        return self.is_known_suit() and self.is_known_rank()

    def restrict_to_suit(self, suit: Suit) -> None:
        """Narrow to a single suit (card was named by a suit clue)."""
        if self.is_known_suit():
            return
        self.possible_suits.clear()
        self.possible_suits.add(suit)

    def restrict_to_rank(self, rank: Rank) -> None:
        """Narrow to a single rank (card was named by a rank clue)."""
        if self.is_known_rank():
            return
        self.possible_ranks.clear()
        self.possible_ranks.add(rank)

    def exclude_suit(self, suit: Suit) -> None:
        """Rule out a suit (card was not named by a suit clue)."""
        assert self.possible_suits != {suit}, f"Cannot exclude the last possible suit {suit}"
        if self.possible_suits != {suit}:
            self.possible_suits.discard(suit)

    def exclude_rank(self, rank: Rank) -> None:
        """Rule out a rank (card was not named by a rank clue)."""
        assert self.possible_ranks != {rank}, f"Cannot exclude the last possible rank {rank}"
        if self.possible_ranks != {rank}:
            self.possible_ranks.discard(rank)

    def possible_cards(self) -> list[Card]:
        """Every card identity consistent with this knowledge, in suit/rank order."""
        suits = [s for s in SUITS if s in self.possible_suits]
        ranks = [r for r in RANKS if r in self.possible_ranks]
        return [Card(suit=s, rank=r) for s, r in product(suits, ranks)]

    def model_dump(self, **kwargs) -> dict[str, Any]:
        """Custom serialization for sets."""
        data = super().model_dump(**kwargs)
        data["possible_suits"] = [s for s in SUITS if s in self.possible_suits]
        data["possible_ranks"] = sorted(self.possible_ranks)
        return data


class HeldCard(BaseModel):
    """A card in a hand: its real identity plus its holder's knowledge of it."""

    card: Card
    knowledge: CardKnowledge = Field(default_factory=CardKnowledge)

    @property
    def suit(self) -> Suit:
        return self.card.suit

    @property
    def rank(self) -> Rank:
        return self.card.rank

    def __str__(self) -> str:
        return str(self.card)


class Board(BaseModel):
    """Played stacks: suit -> highest rank played so far (0 if none)."""

    played: dict[Suit, int] = Field(default_factory=lambda: {suit: 0 for suit in SUITS})

    def can_play(self, card: Card) -> bool:
        return self.played[card.suit] + 1 == card.rank

    def add_card(self, card: Card) -> None:
        """Put a card on its stack. Callers check can_play first."""
        self.played[card.suit] = card.rank

    @property
    def score(self) -> int:
        return sum(self.played.values())

    @property
    def depth(self) -> int:
        # Same quantity as score; the result line calls it "cards".
        return self.score

    def is_full(self) -> bool:
        return self.score == MAX_SCORE

    def __str__(self) -> str:
        return " ".join(f"{suit[0]}{self.played[suit]}" for suit in SUITS)


class Deck(BaseModel):
    """Draw pile. The front of the list is the next card drawn."""

    cards: list[Card] = Field(default_factory=list)

    def draw(self) -> Card:
        if not self.cards:
            raise DeckEmptyError("Cannot draw from an empty deck")
        return self.cards.pop(0)

    def is_empty(self) -> bool:
        return not self.cards

    def __len__(self) -> int:
        return len(self.cards)


class Hand(BaseModel):
    """A player's cards, addressed by 0-based position only."""

    cards: list[HeldCard] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.cards)

    def _check_position(self, position: int) -> None:
        if position < 0 or position >= len(self.cards):
            raise HandPositionError(
                f"Invalid card position {position} for a hand of {len(self.cards)} cards"
            )

    def card_at(self, position: int) -> HeldCard:
        self._check_position(position)
        return self.cards[position]

    def play_card(self, position: int) -> HeldCard:
        self._check_position(position)
        return self.cards.pop(position)

    def drop_card(self, position: int) -> HeldCard:
        return self.play_card(position)

    def add_card(self, card: Card) -> None:
        self.cards.append(HeldCard(card=card))

    def positions_matching_suit(self, suit: Suit) -> list[int]:
        return [i for i, held in enumerate(self.cards) if held.suit == suit]

    def positions_matching_rank(self, rank: Rank) -> list[int]:
        return [i for i, held in enumerate(self.cards) if held.rank == rank]

    def apply_hint_suit(self, positions: list[int], suit: Suit) -> None:
        named = set(positions)
        for i, held in enumerate(self.cards):
            if i in named:
                held.knowledge.restrict_to_suit(suit)
            else:
                held.knowledge.exclude_suit(suit)

    def apply_hint_rank(self, positions: list[int], rank: Rank) -> None:
        named = set(positions)
        for i, held in enumerate(self.cards):
            if i in named:
                held.knowledge.restrict_to_rank(rank)
            else:
                held.knowledge.exclude_rank(rank)

    def is_risky(self, position: int, board: Board) -> bool:
        """
        Whether playing the card at `position` is a gamble.

        The play is safe only when every card the holder could believe
        they are holding is playable on `board`.
        """
        held = self.card_at(position)
        return not all(board.can_play(card) for card in held.knowledge.possible_cards())

    def __str__(self) -> str:
        return " ".join(str(held) for held in self.cards)


# Command records
class StartGameCommand(BaseModel):
    """Deal a new game: both hands first, then the draw pile, in order."""

    command_type: Literal["start"] = "start"
    cards: list[Card]


class PlayCommand(BaseModel):
    """Play a card from the current player's hand by position (0-indexed)."""

    command_type: Literal["play"] = "play"
    card_position: int


class DropCommand(BaseModel):
    """Discard a card from the current player's hand by position (0-indexed)."""

    command_type: Literal["drop"] = "drop"
    card_position: int


class ClueSuitCommand(BaseModel):
    """Tell the next player which of their cards have a suit."""

    command_type: Literal["clue_suit"] = "clue_suit"
    suit: Suit
    card_positions: list[int]


class ClueRankCommand(BaseModel):
    """Tell the next player which of their cards have a rank."""

    command_type: Literal["clue_rank"] = "clue_rank"
    rank: Rank
    card_positions: list[int]


Command = StartGameCommand | PlayCommand | DropCommand | ClueSuitCommand | ClueRankCommand


class GameStatus(str, Enum):
    """Verdict returned for every executed command."""
    CONTINUE = "continue"
    FINISH = "finish"


class GamePhase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FINISHED = "finished"


class FinishReason(str, Enum):
    """Why a game stopped."""
    MISPLAY = "misplay"  # Played card did not fit its stack
    DECK_EXHAUSTED = "deck_exhausted"  # Deck empty after a play
    DECK_RESERVE = "deck_reserve"  # Too few cards left to drop
    UNTRUTHFUL_CLUE = "untruthful_clue"  # Clue positions did not match the hand
    MALFORMED_COMMAND = "malformed_command"  # Command addressed a missing position
    ABANDONED = "abandoned"  # Cut off by a new game or end of input


class ActionResult(BaseModel):
    """Result of applying a command."""

    status: GameStatus
    message: str
    card: Card | None = None  # Card played or dropped
    was_playable: bool | None = None  # For plays
    was_risky: bool | None = None  # For accepted plays
    positions_matched: list[int] | None = None  # For clues: ground truth positions
    finish_reason: FinishReason | None = None


class TurnLog(BaseModel):
    """Log of a single turn."""

    turn_number: int
    player_idx: int
    command: PlayCommand | DropCommand | ClueSuitCommand | ClueRankCommand
    result: ActionResult

    # State snapshot after the command
    score_after: int
    deck_size_after: int
    risk_count_after: int


class HanabiState(BaseModel):
    """The state of one replayed game."""

    hands: list[Hand]
    board: Board = Field(default_factory=Board)
    deck: Deck = Field(default_factory=Deck)

    current_player_idx: int = 0
    turn_number: int = 0  # Gameplay commands applied so far
    risk_count: int = 0

    phase: GamePhase = GamePhase.ACTIVE
    finish_reason: FinishReason | None = None

    history: list[TurnLog] = Field(default_factory=list)

    @property
    def current_hand(self) -> Hand:
        return self.hands[self.current_player_idx]

    @property
    def next_player_idx(self) -> int:
        return (self.current_player_idx + 1) % len(self.hands)

    @property
    def score(self) -> int:
        return self.board.score

    @property
    def deck_size(self) -> int:
        return len(self.deck)

    @property
    def game_over(self) -> bool:
        return self.phase == GamePhase.FINISHED


class GameStats(BaseModel):
    """Counters exposed for a game in progress or finished."""

    turn: int
    board_depth: int
    risk_count: int

    def result_line(self) -> str:
        return f"Turn: {self.turn}, cards: {self.board_depth}, with risk: {self.risk_count}"


class GameResult(BaseModel):
    """Outcome of one replayed game."""

    game_index: int
    stats: GameStats
    finish_reason: FinishReason | None = None
    played_cards: dict[Suit, int] = Field(default_factory=dict)
    history: list[TurnLog] = Field(default_factory=list)

    def result_line(self) -> str:
        return self.stats.result_line()
