from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from ..employees.model import SessionUser

logger = logging.getLogger(__name__)


def current_user() -> SessionUser:
    if "user_id" not in session:
        raise AuthenticationError("Unauthorized")
    return SessionUser(
        user_id=int(session["user_id"]),
        company_id=int(session["company_id"]),
        role=Role(session["role"]),
        name=session.get("name") or "",
    )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def management_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Unauthorized"}), 401
        if not Role(session.get("role")).is_management:
            return jsonify({"error": "Forbidden"}), 403
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_query_id() -> int:
    raw = request.args.get("id")
    if not raw:
        raise ValidationError("ID is required")
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("ID must be a number")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"error": str(e)}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

