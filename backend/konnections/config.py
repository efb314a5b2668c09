"""
Configuration for the Konnections puzzle service.

All settings come from environment variables. The entry point (backend/app.py) calls
load_dotenv() first so a local backend/.env file is picked up during development.
"""

import os

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


class Config:
    """Settings read from the environment at construction time."""

    def __init__(self):
        # Puzzle generation
        self.ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
        self.ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", DEFAULT_MODEL)
        self.PUZZLE_SOURCE_TIMEOUT = float(os.getenv("PUZZLE_SOURCE_TIMEOUT", "60"))

        # Puzzle storage: "memory" keeps puzzles for the life of the process only
        self.PUZZLE_STORE = os.getenv("PUZZLE_STORE", "memory").lower()
        self.SUPABASE_URL = os.getenv("SUPABASE_URL")
        self.SUPABASE_KEY = os.getenv("SUPABASE_KEY")
        self.PUZZLE_BUCKET = os.getenv("PUZZLE_BUCKET", "puzzles")

        # Server
        self.HOST = os.getenv("HOST", "127.0.0.1")
        self.PORT = int(os.getenv("PORT", "5000"))
        self.DEBUG = os.getenv("DEBUG", "False").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
