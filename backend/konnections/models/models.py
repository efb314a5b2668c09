"""
This module defines the puzzle data models for the Konnections game using pydantic. A puzzle board
is produced once per calendar day and never mutated afterwards, so every model here is frozen.

Classes:
- CategoryColor: Enum of the four category colours, plus NONE for unplaceable guess entries.
- TagColor: Enum of the four player-applied tag colours used to organise tiles.
- Category: One group of four words sharing a hidden theme.
- PuzzleBoard: One day's puzzle; four categories and the sixteen words they partition.

Functions:
- get_fallback_puzzle(): Loads the fixed offline puzzle bundled with the package.
"""

import enum
import json
from os import path
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

WORDS_PER_CATEGORY = 4
CATEGORIES_PER_PUZZLE = 4


class CategoryColor(str, enum.Enum):
    YELLOW = "YELLOW"
    GREEN = "GREEN"
    BLUE = "BLUE"
    PURPLE = "PURPLE"
    NONE = "NONE"


class TagColor(str, enum.Enum):
    CORAL = "CORAL"
    TURQUOISE = "TURQUOISE"
    HOTPINK = "HOTPINK"
    SLATE = "SLATE"


TAG_LABELS = {
    TagColor.CORAL: "Group A",
    TagColor.TURQUOISE: "Group B",
    TagColor.HOTPINK: "Group C",
    TagColor.SLATE: "Group D",
}


class Category(BaseModel):
    """
    A group of exactly four words sharing a hidden theme.

    Attributes:
        id (str): Opaque identifier, unique within a puzzle.
        label (str): The theme shown to the player once the category is solved.
        words (list): The four distinct member words.
        color (CategoryColor): YELLOW, GREEN, BLUE or PURPLE.
        difficulty (int): Rank 1 (easiest) to 4 (hardest).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    words: List[str] = Field(min_length=WORDS_PER_CATEGORY, max_length=WORDS_PER_CATEGORY)
    color: CategoryColor
    difficulty: int = Field(ge=1, le=CATEGORIES_PER_PUZZLE)

    @field_validator("words")
    @classmethod
    def validate_unique_words(cls, words: List[str]) -> List[str]:
        if len(set(words)) != len(words):
            raise ValueError(f"Category words must be distinct, got {words}")
        return words

    @field_validator("color")
    @classmethod
    def validate_real_color(cls, color: CategoryColor) -> CategoryColor:
        if color is CategoryColor.NONE:
            raise ValueError("A category cannot have the NONE colour")
        return color


class PuzzleBoard(BaseModel):
    """
    One day's puzzle.

    The categories partition the sixteen-word vocabulary, and colour and difficulty are each used
    exactly once. all_words is serialised as "allWords"; its order carries no meaning.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: str
    categories: List[Category] = Field(
        min_length=CATEGORIES_PER_PUZZLE, max_length=CATEGORIES_PER_PUZZLE
    )
    all_words: List[str] = Field(alias="allWords")

    @model_validator(mode="after")
    def validate_partition(self) -> "PuzzleBoard":
        category_words = [word for category in self.categories for word in category.words]
        if len(set(category_words)) != len(category_words):
            raise ValueError("A word appears in more than one category")

        if len(set(self.all_words)) != len(self.all_words):
            raise ValueError("allWords contains duplicate words")
        if set(self.all_words) != set(category_words):
            raise ValueError("allWords must be exactly the union of the category words")

        colors = {category.color for category in self.categories}
        if len(colors) != len(self.categories):
            raise ValueError("Each category must have a different colour")

        difficulties = {category.difficulty for category in self.categories}
        if len(difficulties) != len(self.categories):
            raise ValueError("Each category must have a different difficulty")

        return self

    @classmethod
    def from_json(cls, raw: "str | bytes") -> "PuzzleBoard":
        """Parses and validates a stored JSON record. Raises pydantic.ValidationError."""
        return cls.model_validate_json(raw)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def category_for(self, word: str) -> "Category | None":
        """Returns the category containing word, or None if the word is not on this board."""
        return next((c for c in self.categories if word in c.words), None)

    def sorted_categories(self) -> "list[Category]":
        return sorted(self.categories, key=lambda c: c.difficulty)


def get_fallback_puzzle() -> PuzzleBoard:
    """
    Loads the fixed offline puzzle from the bundled JSON file.

    Served whenever no cached puzzle exists and generation fails. The word order is the category
    order; callers that show the board are expected to shuffle it.
    """
    json_path = path.join(path.dirname(__file__), "../schemas/fallback_puzzle.json")

    with open(json_path, "r", encoding="utf-8") as file:
        data = json.load(file)

    return PuzzleBoard.model_validate(data)
