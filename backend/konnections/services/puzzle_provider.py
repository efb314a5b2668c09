"""
Puzzle Provider for the Konnections game.

Serves the day's puzzle using a cache-first strategy:

    store hit → serve (cached)
    store miss → generate → persist → serve (fresh)
    generation fails → serve the bundled fallback puzzle (fallback)

Every player asking for the same date gets the same puzzle, and the external
source is called at most once per day under normal conditions. Two players who
both arrive before the first write completes will each generate and each write;
the last write wins. Any valid puzzle for a day is as good as another, so no
lock is taken.

Nothing here retries. A failed lookup degrades to the fallback puzzle once.
"""

import enum
import logging
import random
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from ..models.models import PuzzleBoard, get_fallback_puzzle
from .puzzle_source import PuzzleSource
from .puzzle_store import PuzzleStore, puzzle_key

logger = logging.getLogger(__name__)


class Provenance(enum.Enum):
    CACHED = "cached"
    FRESH = "fresh"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class PuzzleResult:
    board: PuzzleBoard
    provenance: Provenance
    # Set only when a freshly generated puzzle could not be written to the store.
    cache_error: Optional[str] = None

    def to_response(self) -> dict:
        """Builds the GET /puzzle response body."""
        body = {"puzzle": self.board.to_dict(), "cached": self.provenance is Provenance.CACHED}
        if self.provenance is Provenance.FRESH:
            body["cacheError"] = self.cache_error
        elif self.provenance is Provenance.FALLBACK:
            body["fallback"] = True
        return body


class PuzzleProvider:
    """
    Coordinates a PuzzleStore and a PuzzleSource.

    Both collaborators are injected; the provider owns neither client's lifecycle.
    """

    def __init__(self, store: PuzzleStore, source: PuzzleSource, rng: "random.Random | None" = None):
        self.store = store
        self.source = source
        self._rng = rng or random.Random()

    def obtain_puzzle(self, date_key: str) -> PuzzleResult:
        """
        Returns the puzzle for date_key with its provenance. Never raises.

        Cached and fresh boards get a newly shuffled word order on every call. The fallback board
        is returned exactly as bundled.
        """
        key = puzzle_key(date_key)

        cached = self._read_cached(key)
        if cached is not None:
            logger.info("Cache hit for %s", date_key)
            return PuzzleResult(self._shuffled(cached), Provenance.CACHED)

        logger.info("Cache miss for %s, generating from source", date_key)
        try:
            board = self.source.fetch(date_key)
        except Exception as e:
            # Unreachable, rate limited, malformed, or misconfigured: all degrade the same way.
            logger.warning("Puzzle generation failed for %s (%s); serving fallback", date_key, e)
            return PuzzleResult(get_fallback_puzzle(), Provenance.FALLBACK)

        cache_error = None
        try:
            self.store.put(key, board.to_json())
            logger.info("Cached puzzle for %s", date_key)
        except Exception as e:
            cache_error = str(e)
            logger.error("Failed to cache puzzle for %s: %s", date_key, e)

        return PuzzleResult(self._shuffled(board), Provenance.FRESH, cache_error)

    def _read_cached(self, key: str) -> "PuzzleBoard | None":
        """
        Reads and validates a stored puzzle.

        A store that cannot be read and a record that does not validate are both treated as a
        miss, so the day's puzzle gets regenerated and the bad record overwritten.
        """
        try:
            raw = self.store.get(key)
        except Exception as e:
            logger.warning("Could not read %s from store (%s); treating as cache miss", key, e)
            return None

        if raw is None:
            return None

        try:
            return PuzzleBoard.from_json(raw)
        except ValidationError as e:
            logger.warning("Stored puzzle %s is corrupt (%d errors); treating as cache miss", key, e.error_count())
            return None

    def _shuffled(self, board: PuzzleBoard) -> PuzzleBoard:
        words = list(board.all_words)
        self._rng.shuffle(words)
        return board.model_copy(update={"all_words": words})
