"""
Main application module for the Konnections puzzle API.

This module sets up the Flask application, wires the puzzle provider to its store and
source, registers the API Blueprint, and defines the root route and error handlers.

Routes:
- /: Welcome message for the Konnections API.

Error Handlers:
- 404 Not Found: Handles requests for non-existent routes.
- 500 Internal Server Error: Handles internal server errors.
"""

import logging

from flask import Flask

from .blueprints.api.routes import PROVIDER_EXTENSION, api_bp
from .config import Config
from .services.puzzle_provider import PuzzleProvider
from .services.puzzle_source import AnthropicPuzzleSource
from .services.puzzle_store import MemoryPuzzleStore, PuzzleStore, SupabasePuzzleStore
from .services.utils import create_response

logger = logging.getLogger(__name__)


def build_store(config: Config) -> PuzzleStore:
    if config.PUZZLE_STORE == "supabase":
        return SupabasePuzzleStore(
            bucket=config.PUZZLE_BUCKET, url=config.SUPABASE_URL, key=config.SUPABASE_KEY
        )
    if config.PUZZLE_STORE != "memory":
        raise ValueError(f"PUZZLE_STORE must be 'memory' or 'supabase', got {config.PUZZLE_STORE!r}")
    logger.warning("Using the in-memory puzzle store; puzzles are lost on restart")
    return MemoryPuzzleStore()


def build_provider(config: Config) -> PuzzleProvider:
    source = AnthropicPuzzleSource(
        api_key=config.ANTHROPIC_API_KEY,
        model=config.ANTHROPIC_MODEL,
        timeout=config.PUZZLE_SOURCE_TIMEOUT,
    )
    return PuzzleProvider(build_store(config), source)


def create_app(provider: "PuzzleProvider | None" = None, config: "Config | None" = None):
    config = config or Config()
    app = Flask(__name__)
    app.config["DEBUG"] = config.DEBUG
    app.extensions[PROVIDER_EXTENSION] = provider or build_provider(config)
    app.register_blueprint(api_bp)

    @app.route("/")
    def index():
        return create_response(data={"message": "Welcome to the Konnections API!"})

    @app.errorhandler(404)
    def not_found(error):
        return create_response(error="Not Found", status_code=404)

    @app.errorhandler(500)
    def internal_server_error(error):
        return create_response(error="Internal Server Error", status_code=500)

    return app
