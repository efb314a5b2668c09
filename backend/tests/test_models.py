"""
Tests for models.py: the PuzzleBoard and Category pydantic models.

Coverage:
  - get_fallback_puzzle → exact fallback contents, board rules hold
  - PuzzleBoard         → JSON round trip, camelCase field names, validation of the
                          word partition and the colour/difficulty bijections
  - Category            → word count, distinct words, NONE colour rejected
"""

import copy
import json
import unittest

from pydantic import ValidationError

from konnections.models.models import (
    Category,
    CategoryColor,
    PuzzleBoard,
    get_fallback_puzzle,
)

# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------

VALID_BOARD = {
    "date": "October 18, 2026",
    "categories": [
        {"id": "a", "label": "FRUITS", "words": ["APPLE", "BANANA", "CHERRY", "DATE"],
         "color": "YELLOW", "difficulty": 1},
        {"id": "b", "label": "OCEAN LIFE", "words": ["WHALE", "CORAL", "SHARK", "DOLPHIN"],
         "color": "GREEN", "difficulty": 2},
        {"id": "c", "label": "SPACE", "words": ["ASTRONAUT", "ROCKET", "SATELLITE", "NEBULA"],
         "color": "BLUE", "difficulty": 3},
        {"id": "d", "label": "INSTRUMENTS", "words": ["GUITAR", "PIANO", "VIOLIN", "DRUM"],
         "color": "PURPLE", "difficulty": 4},
    ],
    "allWords": [
        "APPLE", "BANANA", "CHERRY", "DATE", "WHALE", "CORAL", "SHARK", "DOLPHIN",
        "ASTRONAUT", "ROCKET", "SATELLITE", "NEBULA", "GUITAR", "PIANO", "VIOLIN", "DRUM",
    ],
}


def _board_data():
    return copy.deepcopy(VALID_BOARD)


# ---------------------------------------------------------------------------
# get_fallback_puzzle
# ---------------------------------------------------------------------------

class TestFallbackPuzzle(unittest.TestCase):

    def test_fallback_contents(self):
        """The fallback board is fixed and must match the published puzzle exactly."""
        board = get_fallback_puzzle()

        self.assertEqual(board.date, "Fallback Puzzle")
        expected = [
            ("1", "WET WEATHER", ["HAIL", "RAIN", "SLEET", "SNOW"], CategoryColor.YELLOW, 1),
            ("2", "WORDS IN A SONG", ["BRIDGE", "CHORUS", "HOOK", "VERSE"], CategoryColor.GREEN, 2),
            ("3", "THINGS THAT SPIN", ["RECORD", "TOP", "WHEEL", "YOYO"], CategoryColor.BLUE, 3),
            ("4", "___ BALL", ["EIGHT", "FIRE", "MEAT", "MOTH"], CategoryColor.PURPLE, 4),
        ]
        actual = [(c.id, c.label, c.words, c.color, c.difficulty) for c in board.categories]
        self.assertEqual(actual, expected)

    def test_fallback_all_words_is_union_of_categories(self):
        board = get_fallback_puzzle()
        union = [word for c in board.categories for word in c.words]
        self.assertEqual(len(board.all_words), 16)
        self.assertEqual(sorted(board.all_words), sorted(union))


# ---------------------------------------------------------------------------
# PuzzleBoard
# ---------------------------------------------------------------------------

class TestPuzzleBoard(unittest.TestCase):

    def test_json_round_trip(self):
        """Serialising then parsing yields an equal board."""
        board = PuzzleBoard.model_validate(_board_data())
        self.assertEqual(PuzzleBoard.from_json(board.to_json()), board)

    def test_serialises_all_words_as_camel_case(self):
        payload = json.loads(PuzzleBoard.model_validate(_board_data()).to_json())
        self.assertIn("allWords", payload)
        self.assertNotIn("all_words", payload)
        self.assertEqual(payload["categories"][0]["color"], "YELLOW")

    def test_accepts_python_field_name(self):
        data = _board_data()
        data["all_words"] = data.pop("allWords")
        board = PuzzleBoard.model_validate(data)
        self.assertEqual(len(board.all_words), 16)

    def test_rejects_overlapping_categories(self):
        data = _board_data()
        data["categories"][1]["words"][0] = "APPLE"
        with self.assertRaises(ValidationError):
            PuzzleBoard.model_validate(data)

    def test_rejects_all_words_mismatch(self):
        data = _board_data()
        data["allWords"][0] = "PEAR"
        with self.assertRaises(ValidationError):
            PuzzleBoard.model_validate(data)

    def test_rejects_duplicate_in_all_words(self):
        data = _board_data()
        data["allWords"].append("APPLE")
        with self.assertRaises(ValidationError):
            PuzzleBoard.model_validate(data)

    def test_rejects_shared_colour(self):
        data = _board_data()
        data["categories"][1]["color"] = "YELLOW"
        with self.assertRaises(ValidationError):
            PuzzleBoard.model_validate(data)

    def test_rejects_shared_difficulty(self):
        data = _board_data()
        data["categories"][3]["difficulty"] = 3
        with self.assertRaises(ValidationError):
            PuzzleBoard.model_validate(data)

    def test_rejects_wrong_category_count(self):
        data = _board_data()
        removed = data["categories"].pop()
        data["allWords"] = [w for w in data["allWords"] if w not in removed["words"]]
        with self.assertRaises(ValidationError):
            PuzzleBoard.model_validate(data)

    def test_from_json_rejects_partial_record(self):
        with self.assertRaises(ValidationError):
            PuzzleBoard.from_json('{"date": "x", "categories": [')

    def test_category_for(self):
        board = PuzzleBoard.model_validate(_board_data())
        self.assertEqual(board.category_for("SHARK").label, "OCEAN LIFE")
        self.assertIsNone(board.category_for("PEAR"))

    def test_sorted_categories(self):
        data = _board_data()
        data["categories"].reverse()
        board = PuzzleBoard.model_validate(data)
        self.assertEqual([c.difficulty for c in board.sorted_categories()], [1, 2, 3, 4])

    def test_board_is_immutable(self):
        board = PuzzleBoard.model_validate(_board_data())
        with self.assertRaises(ValidationError):
            board.date = "other"


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------

class TestCategory(unittest.TestCase):

    def _category(self, **overrides):
        data = {"id": "x", "label": "L", "words": ["A", "B", "C", "D"], "color": "BLUE", "difficulty": 3}
        data.update(overrides)
        return Category.model_validate(data)

    def test_valid_category(self):
        self.assertEqual(self._category().color, CategoryColor.BLUE)

    def test_rejects_three_words(self):
        with self.assertRaises(ValidationError):
            self._category(words=["A", "B", "C"])

    def test_rejects_repeated_word(self):
        with self.assertRaises(ValidationError):
            self._category(words=["A", "B", "C", "C"])

    def test_rejects_none_colour(self):
        with self.assertRaises(ValidationError):
            self._category(color="NONE")

    def test_rejects_out_of_range_difficulty(self):
        with self.assertRaises(ValidationError):
            self._category(difficulty=5)


if __name__ == "__main__":
    unittest.main()
