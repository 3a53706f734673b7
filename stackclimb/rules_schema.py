"""Validation schema for table rules configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .cards import MAX_RANK, MIN_RANK, Suit

SUIT_NAMES = tuple(suit.value for suit in Suit)


def _validate_suit(value: str) -> str:
    normalized = value.lower()
    if normalized not in SUIT_NAMES:
        raise ValueError(f"Unknown suit: {value!r}")
    return normalized


class RuleSet(BaseModel):
    player_count: int = Field(4, ge=2, le=8, description="Seats dealt into the game.")
    passes_to_clear: Optional[int] = Field(
        None,
        ge=1,
        description="Consecutive passes that clear the table; defaults to one fewer than player_count.",
    )
    opening_rank: int = Field(3, ge=MIN_RANK, le=MAX_RANK, description="Rank of the card that must open the deal.")
    opening_suit: str = Field("spades", description="Suit of the card that must open the deal.")
    clear_rank: int = Field(2, ge=MIN_RANK, le=MAX_RANK, description="Playing this rank clears the table.")
    cap_rank: int = Field(8, ge=MIN_RANK, le=MAX_RANK, description="Playing this rank caps the trick at it.")
    four_of_a_kind_beats_cap: bool = Field(
        False,
        description="Whether completing four of the cap rank clears instead of capping.",
    )
    clearing_player_leads: bool = Field(
        False,
        description="Whether the player who cleared with a 2 or four of a kind leads next.",
    )
    allow_pass_on_lead: bool = Field(
        False,
        description="Whether a player may pass while the trick is empty.",
    )

    @field_validator("opening_suit")
    @classmethod
    def validate_opening_suit(cls, value: str) -> str:
        return _validate_suit(value)

    @model_validator(mode="after")
    def validate_table(self) -> "RuleSet":
        if self.passes_to_clear is None:
            self.passes_to_clear = self.player_count - 1
        if self.passes_to_clear >= self.player_count:
            raise ValueError("passes_to_clear must be lower than player_count.")
        if self.clear_rank == self.cap_rank:
            raise ValueError("clear_rank and cap_rank must differ.")
        return self

    @property
    def opening_card_suit(self) -> Suit:
        return Suit(self.opening_suit)


DEFAULT_RULES = RuleSet()


def load_rules(path: Union[str, Path]) -> RuleSet:
    """Read a JSON rules file; missing keys fall back to defaults."""
    return RuleSet.model_validate_json(Path(path).read_text(encoding="utf-8"))
