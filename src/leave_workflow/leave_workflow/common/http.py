from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Tuple

from flask import Flask, jsonify, session

from .datetime_utils import parse_iso_date
from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    InvalidTransition,
    NotFound,
    PersistenceFailure,
    Unauthorized,
    ValidationError,
)

logger = logging.getLogger(__name__)


def json_error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return json_error("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return json_error("Please sign in to continue", 401)
            _, role = current_actor()
            if role not in roles:
                return json_error("You do not have access to this page", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_actor() -> Tuple[str, Role]:
    """(user_id, role) as set on the session by the login layer."""
    try:
        role = Role.parse(session.get("role") or "")
    except ValueError:
        raise Unauthorized("Your session has no valid role")
    return str(session["user_id"]), role


def parse_date_arg(value, field_name: str) -> date:
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a date in YYYY-MM-DD format")


def register_error_handlers(app: Flask) -> None:
    """Map domain errors to JSON responses."""

    @app.errorhandler(ValidationError)
    def _validation(e):
        return json_error(str(e), 400)

    @app.errorhandler(AuthorizationError)
    def _authorization(e):
        return json_error(str(e), 403)

    @app.errorhandler(NotFound)
    def _not_found(e):
        return json_error(str(e), 404)

    @app.errorhandler(InvalidTransition)
    def _invalid_transition(e):
        return json_error(str(e), 409)

    @app.errorhandler(DomainError)
    def _domain(e):
        return json_error(str(e), 400)

    @app.errorhandler(PersistenceFailure)
    def _persistence(e):
        logger.warning("Persistence failure: %s", e)
        return json_error("The leave store is temporarily unavailable, please retry", 503)
