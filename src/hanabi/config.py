"""Configuration for Hanabi log replays."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator


# Fewest cards that must remain in the deck for a drop to be answered with a draw
DEFAULT_MIN_DECK_AFTER_DROP = 2


def _env_flag(name: str) -> bool | None:
    value = os.environ.get(name)
    if value is None:
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


class ReplayConfig(BaseModel):
    """Configuration for replaying game logs."""

    num_players: int = 2
    hand_size: int = Field(default=5, ge=1)
    min_deck_after_drop: int = Field(default=DEFAULT_MIN_DECK_AFTER_DROP, ge=0)

    # Report games cut off by a new start command or end of input
    report_unfinished: bool = False

    # Re-raise malformed lines/positions instead of logging and moving on
    strict: bool = False

    @field_validator("num_players")
    @classmethod
    def _two_players_only(cls, value: int) -> int:
        if value != 2:
            raise ValueError(f"Replays are two-player only, got {value} players")
        return value


def config_from_env(**overrides) -> ReplayConfig:
    """
    Build a ReplayConfig from HANABI_* environment variables.

    Keyword overrides win over the environment; None overrides are ignored.
    """
    values: dict[str, object] = {}

    hand_size = os.environ.get("HANABI_HAND_SIZE")
    if hand_size:
        values["hand_size"] = hand_size

    min_deck = os.environ.get("HANABI_MIN_DECK_AFTER_DROP")
    if min_deck:
        values["min_deck_after_drop"] = min_deck

    report_unfinished = _env_flag("HANABI_REPORT_UNFINISHED")
    if report_unfinished is not None:
        values["report_unfinished"] = report_unfinished

    strict = _env_flag("HANABI_STRICT")
    if strict is not None:
        values["strict"] = strict

    values.update({k: v for k, v in overrides.items() if v is not None})
    return ReplayConfig(**values)
