"""
Local day cache for Konnections clients.

Keeps the puzzle a player already fetched for their local calendar day so reopening the game
does not hit the server again. One JSON file per day, named konnections_puzzle_<YYYY-MM-DD>.json.
Entries more than CACHE_EXPIRY_DAYS old are removed whenever a new entry is written.

Functions:
- get_local_date_key(): Today's date in the player's local time as YYYY-MM-DD.

Classes:
- LocalPuzzleCache: get/put/cleanup over a cache directory.
"""

import logging
from datetime import date, datetime, timedelta
from pathlib import Path

from pydantic import ValidationError

from ..models.models import PuzzleBoard

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "konnections_puzzle_"
CACHE_EXPIRY_DAYS = 7


def get_local_date_key(today: "date | None" = None) -> str:
    """Connections refreshes at local midnight, so the key is the local date, not UTC."""
    return (today or datetime.now().date()).isoformat()


class LocalPuzzleCache:

    def __init__(self, directory: "str | Path", today=None):
        self.directory = Path(directory)
        # Injectable clock for the expiry check.
        self._today = today or (lambda: datetime.now().date())

    def _path(self, date_key: str) -> Path:
        return self.directory / f"{CACHE_KEY_PREFIX}{date_key}.json"

    def get(self, date_key: str) -> "PuzzleBoard | None":
        """Returns the cached puzzle for date_key, or None when missing or unreadable."""
        path = self._path(date_key)
        if not path.exists():
            return None
        try:
            return PuzzleBoard.from_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.error("Error reading puzzle from cache (%s): %s", path.name, e)
            return None

    def put(self, date_key: str, puzzle: PuzzleBoard) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._path(date_key).write_text(puzzle.to_json(), encoding="utf-8")
        except OSError as e:
            logger.error("Error caching puzzle for %s: %s", date_key, e)
            return

        self.cleanup_old_puzzles()

    def cleanup_old_puzzles(self) -> int:
        """Removes entries dated before the expiry cutoff and returns how many were removed."""
        cutoff = self._today() - timedelta(days=CACHE_EXPIRY_DAYS)
        removed = 0

        for path in self.directory.glob(f"{CACHE_KEY_PREFIX}*.json"):
            date_str = path.stem[len(CACHE_KEY_PREFIX):]
            try:
                cached_date = date.fromisoformat(date_str)
            except ValueError:
                # Not one of ours; leave it alone.
                continue
            if cached_date < cutoff:
                try:
                    path.unlink()
                    removed += 1
                except OSError as e:
                    logger.error("Error removing old cached puzzle %s: %s", path.name, e)

        if removed:
            logger.info("Cleaned up %d old cached puzzles", removed)
        return removed
