"""
Entry point for the Konnections puzzle server.

Loads backend/.env, configures logging, builds the puzzle provider (store + source)
and runs the Flask development server.

Run from backend/: python app.py
"""

import logging

from dotenv import load_dotenv

from konnections.app import create_app
from konnections.config import Config


def main():
    load_dotenv()
    config = Config()

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    app = create_app(config=config)
    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()
