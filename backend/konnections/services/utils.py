"""
Utility functions for the Konnections API.

Functions:
- parse_date_param(field): Reads and validates a YYYY-MM-DD query parameter.
- create_response(data, error, status_code): Creates a JSON response from a body dict or an error message.
"""

from datetime import date, datetime

from flask import jsonify, request


def parse_date_param(field: str = "date"):
    """
    Reads a YYYY-MM-DD date from the query string, defaulting to the server's current date.

    Clients should always send their local date; the default exists for callers that don't.

    :param field: The query parameter name.
    :return: A tuple of (date_key, error). On success error is None; on failure date_key is None
             and error holds a message for the client.
    """
    value = request.args.get(field)
    if not value:
        return date.today().isoformat(), None

    try:
        return datetime.strptime(value, "%Y-%m-%d").date().isoformat(), None
    except ValueError:
        return None, f"Invalid {field} '{value}'. Expected YYYY-MM-DD."


def create_response(data=None, error=None, status_code=200):
    """
    Creates a JSON response with the provided body or error message.

    :param data: The response body, if any. Its keys are returned at the top level.
    :param error: The error message to include in the response, if any.
    :param status_code: The HTTP status code for the response (default: 200).
    :return: A JSON response with the provided data or error message.
    """
    response = {}
    if data is not None:
        response.update(data)
    if error is not None:
        response["error"] = error
    return jsonify(response), status_code
