"""
This module, 'routes.py', defines the HTTP interface of the Konnections puzzle service.

Detailed Endpoint Descriptions:
- GET /puzzle?date=YYYY-MM-DD: Returns the day's puzzle, from the cache when possible.

Associated Functions:
- get_puzzle(): Serves the puzzle for the requested (or current) date.
"""

import logging

from flask import Blueprint, current_app

from ...services.puzzle_provider import PuzzleProvider
from ...services.utils import create_response, parse_date_param

logger = logging.getLogger(__name__)

api_bp = Blueprint("konnections", __name__)

PROVIDER_EXTENSION = "konnections.puzzle_provider"


def get_provider() -> PuzzleProvider:
    return current_app.extensions[PROVIDER_EXTENSION]


@api_bp.route("/puzzle", methods=["GET"])
def get_puzzle():
    """
    Returns the puzzle for the date in the query string.

    Every handled outcome, fallback included, is a 200:
        {"puzzle": {...}, "cached": true}
        {"puzzle": {...}, "cached": false, "cacheError": null | "..."}
        {"puzzle": {...}, "cached": false, "fallback": true}
    """
    date_key, error = parse_date_param("date")
    if error:
        return create_response(error=error, status_code=400)

    logger.info("Fetching puzzle for date: %s", date_key)
    try:
        result = get_provider().obtain_puzzle(date_key)
        body = result.to_response()
    except Exception:
        logger.exception("Unexpected error serving puzzle for %s", date_key)
        return create_response(error="Failed to fetch puzzle", status_code=500)

    return create_response(data=body)
