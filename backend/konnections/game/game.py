"""
Game logic module for the Konnections game.

GameSession is the guess engine: a state machine built from one PuzzleBoard that turns player
actions into solved categories, mistake counts and a final WON/LOST outcome. It does no I/O and
never raises for a bad action; anything not allowed in the current state is a silent no-op.

Classes:
- GameStatus: PLAYING, WON or LOST. Only PLAYING → WON and PLAYING → LOST ever happen.
- GuessOutcome: What a submitted guess turned out to be.
- Tile: Session-local state of one word on the board.
- GuessResult: The category colours of one submitted guess, in selection order.
- GameSession: Owns the tiles and session state; the only thing that mutates them.
"""

import enum
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..models.models import Category, CategoryColor, PuzzleBoard, TagColor

logger = logging.getLogger(__name__)

INITIAL_MISTAKES = 4
GROUP_SIZE = 4
MAX_MARKS = 4

# Seconds a transient message stays up before the client clears it.
MESSAGE_CLEAR_DELAY = 2.0

MESSAGE_CATEGORY_FOUND = "Category found!"
MESSAGE_ONE_AWAY = "One away..."
MESSAGE_NOT_QUITE = "Not quite."
MESSAGE_WON = "Splendid!"
MESSAGE_LOST = "Next time!"

TRANSIENT_MESSAGES = {MESSAGE_CATEGORY_FOUND, MESSAGE_ONE_AWAY, MESSAGE_NOT_QUITE}


class GameStatus(enum.Enum):
    PLAYING = "PLAYING"
    WON = "WON"
    LOST = "LOST"


class GuessOutcome(enum.Enum):
    CORRECT = "CORRECT"
    ONE_AWAY = "ONE_AWAY"
    INCORRECT = "INCORRECT"


@dataclass
class Tile:
    word: str
    marks: List[TagColor] = field(default_factory=list)
    is_selected: bool = False
    is_solved: bool = False
    solved_color: Optional[CategoryColor] = None

    def solve(self, color: CategoryColor) -> None:
        # A tile is solved once; the first colour sticks.
        if self.is_solved:
            return
        self.is_solved = True
        self.is_selected = False
        self.solved_color = color

    def to_state(self) -> dict:
        return {
            "word": self.word,
            "marks": [mark.value for mark in self.marks],
            "isSelected": self.is_selected,
            "isSolved": self.is_solved,
            "solvedColor": self.solved_color.value if self.solved_color else None,
        }


@dataclass(frozen=True)
class GuessResult:
    colors: Tuple[CategoryColor, ...]

    def to_state(self) -> dict:
        return {"colors": [color.value for color in self.colors]}


class GameSession:
    """
    One player's game against one PuzzleBoard.

    Tiles start in the board's all_words order. The board itself is never modified.
    """

    def __init__(self, board: PuzzleBoard, rng: "random.Random | None" = None):
        self.board = board
        self.tiles: List[Tile] = [Tile(word) for word in board.all_words]
        self.mistakes_remaining = INITIAL_MISTAKES
        self.solved_categories: List[Category] = []
        self.status = GameStatus.PLAYING
        self.guess_history: List[GuessResult] = []
        self.active_tag: Optional[TagColor] = None
        self.message = ""

        self._rng = rng or random.Random()
        self._tiles_by_word = {tile.word: tile for tile in self.tiles}
        # Selected words in the order the player picked them.
        self._selection: List[str] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self.status is GameStatus.PLAYING

    @property
    def selected_words(self) -> List[str]:
        return list(self._selection)

    @property
    def can_submit(self) -> bool:
        return self.is_playing and len(self._selection) == GROUP_SIZE

    def tile(self, word: str) -> Optional[Tile]:
        return self._tiles_by_word.get(word)

    def unsolved_tiles(self) -> List[Tile]:
        return [tile for tile in self.tiles if not tile.is_solved]

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    def select(self, word: str) -> bool:
        """
        Toggles selection of a tile, or toggles the active tag on it when tag mode is on.

        Returns True if the action changed anything.
        """
        if not self.is_playing:
            return False

        tile = self.tile(word)
        if tile is None or tile.is_solved:
            return False

        if self.active_tag is not None:
            return self._toggle_mark(tile, self.active_tag)

        if tile.is_selected:
            tile.is_selected = False
            self._selection.remove(word)
            return True

        if len(self._selection) >= GROUP_SIZE:
            return False

        tile.is_selected = True
        self._selection.append(word)
        return True

    def deselect_all(self) -> None:
        if not self.is_playing:
            return
        for tile in self.tiles:
            tile.is_selected = False
        self._selection = []

    def shuffle(self) -> None:
        """Shuffles the unsolved tiles. Solved tiles stay in front, in their existing order."""
        if not self.is_playing:
            return
        solved = [tile for tile in self.tiles if tile.is_solved]
        unsolved = self.unsolved_tiles()
        self._rng.shuffle(unsolved)
        self.tiles = solved + unsolved

    def tag(self, tag_color: TagColor) -> None:
        """Turns on tag mode for tag_color. Choosing the active colour again turns tag mode off."""
        if not self.is_playing:
            return
        self.active_tag = None if self.active_tag is tag_color else tag_color

    def clear_tag(self) -> None:
        if not self.is_playing:
            return
        self.active_tag = None

    def clear_all_marks(self) -> None:
        for tile in self.tiles:
            tile.marks = []

    def clear_message(self) -> None:
        """Clears a transient message. Called by the client MESSAGE_CLEAR_DELAY seconds after it appears."""
        if self.message in TRANSIENT_MESSAGES:
            self.message = ""

    def submit(self) -> Optional[GuessOutcome]:
        """
        Evaluates the four selected tiles.

        An exact match with a category is checked first, so a correct guess never costs a
        mistake. Returns the outcome, or None when nothing was submitted.
        """
        if not self.can_submit:
            return None

        selected = list(self._selection)
        guess = GuessResult(tuple(self._color_of(word) for word in selected))
        self.guess_history.append(guess)

        matched = self._matching_category(selected)
        if matched is not None:
            self._solve_category(matched)
            return GuessOutcome.CORRECT

        return self._record_mistake(selected)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _toggle_mark(self, tile: Tile, tag_color: TagColor) -> bool:
        if tag_color in tile.marks:
            tile.marks = [mark for mark in tile.marks if mark is not tag_color]
            return True
        if len(tile.marks) >= MAX_MARKS:
            return False
        tile.marks = tile.marks + [tag_color]
        return True

    def _color_of(self, word: str) -> CategoryColor:
        category = self.board.category_for(word)
        return category.color if category else CategoryColor.NONE

    def _matching_category(self, words: List[str]) -> Optional[Category]:
        guess = set(words)
        return next((c for c in self.board.categories if set(c.words) == guess), None)

    def _solve_category(self, category: Category) -> None:
        for word in category.words:
            self._tiles_by_word[word].solve(category.color)
        self._selection = []

        self.solved_categories = sorted(
            self.solved_categories + [category], key=lambda c: c.difficulty
        )
        logger.debug("Solved %s (%d/%d)", category.label, len(self.solved_categories), len(self.board.categories))

        if len(self.solved_categories) == len(self.board.categories):
            self.status = GameStatus.WON
            self.message = MESSAGE_WON
        else:
            self.message = MESSAGE_CATEGORY_FOUND

    def _record_mistake(self, words: List[str]) -> GuessOutcome:
        self.mistakes_remaining -= 1

        guess = set(words)
        max_overlap = max(len(guess & set(c.words)) for c in self.board.categories)
        outcome = GuessOutcome.ONE_AWAY if max_overlap == GROUP_SIZE - 1 else GuessOutcome.INCORRECT
        self.message = MESSAGE_ONE_AWAY if outcome is GuessOutcome.ONE_AWAY else MESSAGE_NOT_QUITE

        if self.mistakes_remaining <= 0:
            self.mistakes_remaining = 0
            self.status = GameStatus.LOST
            self.message = MESSAGE_LOST
            self._reveal()

        return outcome

    def _reveal(self) -> None:
        """Shows the full solution. Only reached once mistakes run out; safe to repeat."""
        for tile in self.tiles:
            category = self.board.category_for(tile.word)
            if category is not None:
                tile.solve(category.color)
        self._selection = []
        self.solved_categories = self.board.sorted_categories()

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_state(self) -> dict:
        """Returns a camelCase snapshot of the session for API callers and clients."""
        return {
            "date": self.board.date,
            "tiles": [tile.to_state() for tile in self.tiles],
            "mistakesRemaining": self.mistakes_remaining,
            "solvedCategories": [c.model_dump(mode="json") for c in self.solved_categories],
            "status": self.status.value,
            "guessHistory": [guess.to_state() for guess in self.guess_history],
            "message": self.message,
            "activeTag": self.active_tag.value if self.active_tag else None,
        }
