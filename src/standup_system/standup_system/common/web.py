from __future__ import annotations

import logging
from datetime import date
from functools import wraps

from flask import abort, jsonify, session

from ..common.datetime_utils import parse_iso_date
from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    InvalidTransition,
    SessionNotActive,
    SessionNotFound,
    TransientStoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

OPERATOR_ROLES = {Role.ADMIN.value, Role.CO_ADMIN.value}


def operator_required(view):
    """Allow admins and co-admins.

    The role is put into the Flask session by the external auth layer; it is
    trusted as-is here.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Authentication required"}), 401

        if session.get("role") not in OPERATOR_ROLES:
            return jsonify({"success": False, "message": "Operator role required"}), 403

        return view(*args, **kwargs)

    return wrapper


def current_operator() -> str:
    return str(session.get("name") or session.get("user_id") or "unknown")


def session_date_from_path(value: str) -> date:
    try:
        return parse_iso_date(value)
    except ValueError:
        abort(404)


def error_response(e: DomainError):
    if isinstance(e, ValidationError):
        code = 400
    elif isinstance(e, AuthorizationError):
        code = 403
    elif isinstance(e, SessionNotFound):
        code = 404
    elif isinstance(e, (InvalidTransition, SessionNotActive)):
        code = 409
    elif isinstance(e, TransientStoreError):
        code = 503
    else:
        code = 400

    if code >= 500:
        logger.warning("Transient failure surfaced to operator: %s", e)
    return jsonify({"success": False, "error": type(e).__name__, "message": str(e)}), code
