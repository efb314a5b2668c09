"""
Puzzle Source for the Konnections game.

Produces the candidate puzzle for a calendar day. The production source asks Claude to
look up that day's NYT Connections puzzle with the server-side web search tool and to
return it through a structured-output tool (submit_puzzle). The tool input is validated
strictly against the PuzzleBoard model; anything that does not validate is rejected
rather than patched up into a partial board.

Usage:
    from konnections.services.puzzle_source import AnthropicPuzzleSource

    source = AnthropicPuzzleSource(api_key=os.environ["ANTHROPIC_API_KEY"])
    board = source.fetch("2026-10-18")
    # Raises PuzzleSourceUnavailableError on any failure; details are logged at ERROR level.
"""

import logging
import os
import uuid
from abc import ABC, abstractmethod
from datetime import datetime

import anthropic
from pydantic import ValidationError

from ..config import DEFAULT_MODEL
from ..models.models import CategoryColor, PuzzleBoard

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_TOKENS = 4096
MAX_SEARCHES = 5
MAX_CONTINUATIONS = 2

# Low temperature: this is a lookup, not a creative task.
TEMPERATURE = 0.2

_CATEGORY_COLORS = [c.value for c in CategoryColor if c is not CategoryColor.NONE]


class PuzzleSourceUnavailableError(Exception):
    """Raised when the source cannot produce a valid puzzle (unreachable, rate limited, malformed)."""
    pass


class PuzzleSource(ABC):

    @abstractmethod
    def fetch(self, date_key: str) -> PuzzleBoard:
        """Returns the puzzle for date_key (YYYY-MM-DD) or raises PuzzleSourceUnavailableError."""
        ...


# ---------------------------------------------------------------------------
# Tool schemas for structured Claude outputs
# ---------------------------------------------------------------------------

_WEB_SEARCH_TOOL = {
    "type": "web_search_20250305",
    "name": "web_search",
    "max_uses": MAX_SEARCHES,
}

_PUZZLE_TOOL = {
    "name": "submit_puzzle",
    "description": "Submit the four categories of the Connections puzzle you found.",
    "input_schema": {
        "type": "object",
        "properties": {
            "date": {
                "type": "string",
                "description": "The date of the puzzle you found, e.g. 'October 18, 2026'.",
            },
            "categories": {
                "type": "array",
                "description": "Exactly 4 categories, one per colour.",
                "items": {
                    "type": "object",
                    "properties": {
                        "label": {
                            "type": "string",
                            "description": "The category name exactly as revealed, in UPPERCASE.",
                        },
                        "words": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Exactly 4 UPPERCASE words.",
                        },
                        "color": {
                            "type": "string",
                            "enum": _CATEGORY_COLORS,
                        },
                        "difficulty": {
                            "type": "integer",
                            "description": "1=YELLOW, 2=GREEN, 3=BLUE, 4=PURPLE.",
                        },
                    },
                    "required": ["label", "words", "color", "difficulty"],
                },
            },
        },
        "required": ["date", "categories"],
    },
}


def format_puzzle_date(date_key: str) -> str:
    """Turns '2026-10-18' into 'October 18, 2026'."""
    day = datetime.strptime(date_key, "%Y-%m-%d")
    return f"{day:%B} {day.day}, {day.year}"


def _build_prompt(long_date: str) -> str:
    return (
        f"Search for the NYT Connections puzzle for {long_date}.\n"
        "Find the 4 categories (Yellow, Green, Blue, Purple) and their 4 words each.\n"
        "When you have them, call the submit_puzzle tool exactly once. "
        "Do not reply with plain text.\n"
        "If you cannot find this day's puzzle, submit the most recent one you can find "
        "and set date to the day it was published."
    )


def board_from_tool_input(data: dict, fallback_date: str) -> PuzzleBoard:
    """
    Builds a PuzzleBoard from the submit_puzzle tool input.

    Category ids are generated here; words and labels are normalised to stripped uppercase.

    Raises:
        PuzzleSourceUnavailableError: If the input does not describe a valid puzzle.
    """
    try:
        categories = [
            {
                "id": uuid.uuid4().hex[:9],
                "label": str(category["label"]).strip().upper(),
                "words": [str(word).strip().upper() for word in category["words"]],
                "color": str(category["color"]).strip().upper(),
                "difficulty": category["difficulty"],
            }
            for category in data["categories"]
        ]
        return PuzzleBoard.model_validate({
            "date": data.get("date") or fallback_date,
            "categories": categories,
            "allWords": [word for category in categories for word in category["words"]],
        })
    except (KeyError, TypeError, ValidationError) as exc:
        raise PuzzleSourceUnavailableError(f"Puzzle failed schema validation: {exc}") from exc


class AnthropicPuzzleSource(PuzzleSource):
    """
    Looks puzzles up with Claude.

    The client is built once and owned by whoever constructs the source (normally the
    entry point). Automatic SDK retries are disabled: a failed lookup is handled once by
    the provider's fallback path.
    """

    def __init__(
        self,
        client: "anthropic.Anthropic | None" = None,
        api_key: "str | None" = None,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
    ):
        self.model = model
        self.timeout = timeout
        self._client = client
        self._api_key = api_key

    def _get_client(self) -> anthropic.Anthropic:
        if self._client is None:
            api_key = self._api_key or os.getenv("ANTHROPIC_API_KEY")
            if not api_key:
                raise RuntimeError(
                    "ANTHROPIC_API_KEY environment variable must be set. "
                    "Add it to backend/.env (use .env.example as a template)."
                )
            self._client = anthropic.Anthropic(api_key=api_key, timeout=self.timeout, max_retries=0)
        return self._client

    def fetch(self, date_key: str) -> PuzzleBoard:
        long_date = format_puzzle_date(date_key)
        client = self._get_client()
        messages = [{"role": "user", "content": _build_prompt(long_date)}]

        logger.info("Looking up puzzle for %s with %s", long_date, self.model)
        response = self._create(client, messages, date_key)

        # A long web search can pause the turn; sending the partial turn back resumes it.
        continuations = 0
        while response.stop_reason == "pause_turn" and continuations < MAX_CONTINUATIONS:
            continuations += 1
            logger.info("Turn paused for %s, continuing (%d/%d)", date_key, continuations, MAX_CONTINUATIONS)
            messages.append({"role": "assistant", "content": response.content})
            response = self._create(client, messages, date_key)

        # Web search results come back as server_tool_use blocks; only ours counts.
        tool_block = next(
            (b for b in response.content if b.type == "tool_use" and b.name == _PUZZLE_TOOL["name"]),
            None,
        )
        if tool_block is None:
            logger.error(
                "No submit_puzzle block for %s (stop_reason=%s)", date_key, response.stop_reason
            )
            raise PuzzleSourceUnavailableError(
                f"Response contained no {_PUZZLE_TOOL['name']} tool call"
            )

        board = board_from_tool_input(tool_block.input, long_date)
        logger.info("Fetched puzzle '%s' for %s", board.date, date_key)
        return board

    def _create(self, client: anthropic.Anthropic, messages: list, date_key: str):
        try:
            return client.messages.create(
                model=self.model,
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
                tools=[_WEB_SEARCH_TOOL, _PUZZLE_TOOL],
                messages=list(messages),
            )
        except anthropic.APIError as exc:
            # Rate limits, timeouts, connection and server errors all land here.
            logger.error("Anthropic API error while fetching puzzle for %s: %s", date_key, exc)
            raise PuzzleSourceUnavailableError(f"Anthropic API error: {exc}") from exc


# ---------------------------------------------------------------------------
# Manual end-to-end check
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import sys
    from datetime import date

    from dotenv import load_dotenv

    # Run from backend/: python -m konnections.services.puzzle_source [YYYY-MM-DD]
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    requested = sys.argv[1] if len(sys.argv) > 1 else date.today().isoformat()
    try:
        puzzle = AnthropicPuzzleSource(model=os.getenv("ANTHROPIC_MODEL", DEFAULT_MODEL)).fetch(requested)
    except PuzzleSourceUnavailableError as exc:
        print(f"[FAILED] {exc}")
        sys.exit(1)

    print(f"Puzzle: {puzzle.date}")
    for category in puzzle.sorted_categories():
        print(f"  [{category.color.value}] {category.label}: {', '.join(category.words)}")
