"""
Builds the shareable results summary: a title line, the puzzle date, then one row of
coloured squares per submitted guess.
"""

from typing import Iterable, Optional

from ..models.models import CategoryColor
from .game import GameSession, GuessResult

SHARE_TITLE = "Konnections"

COLOR_EMOJI = {
    CategoryColor.YELLOW: "🟨",
    CategoryColor.GREEN: "🟩",
    CategoryColor.BLUE: "🟦",
    CategoryColor.PURPLE: "🟪",
    CategoryColor.NONE: "⬜",
}


def guess_to_emoji(guess: GuessResult) -> str:
    return "".join(COLOR_EMOJI.get(color, COLOR_EMOJI[CategoryColor.NONE]) for color in guess.colors)


def build_share_text(guess_history: Iterable[GuessResult], date: Optional[str] = None) -> str:
    grid = "\n".join(guess_to_emoji(guess) for guess in guess_history)
    return f"{SHARE_TITLE}\nPuzzle: {date or 'Today'}\n{grid}"


def share_session(session: GameSession) -> str:
    return build_share_text(session.guess_history, session.board.date)
