# Overview: Shared JSON helpers for the API blueprints.

from flask import jsonify, request

from ..errors import BullionError


def json_body() -> dict:
    """Request JSON body; anything that is not an object becomes {} for validation to reject."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def json_error(exc: BullionError):
    return jsonify(exc.to_dict()), exc.status_code


def internal_error():
    return jsonify({"error": "Internal server error"}), 500
