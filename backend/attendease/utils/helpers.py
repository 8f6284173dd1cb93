"""Helper functions for the application."""
from datetime import datetime, timezone
from flask import jsonify
from typing import Any

def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def handle_error(message, status_code: int, reason: str = None):
    """Handle application errors with consistent format."""
    body = {
        'error': True,
        'message': str(message),
        'status_code': status_code
    }
    if reason:
        body['reason'] = reason
    return jsonify(body), status_code

def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code

def error_response(message: str, status_code: int = 400, reason: str = None, data: Any = None):
    """Return consistent error response."""
    body = {
        'error': True,
        'message': message,
        'status_code': status_code
    }
    if reason:
        body['reason'] = reason
    if data is not None:
        body['data'] = data
    return jsonify(body), status_code
