"""Flask glue shared by the feature controllers: auth guards, class scoping, JSON envelopes."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    SaveTimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (SaveTimeoutError, 504),
)


def ok(message: str = "", *, code: int = 200, **data: Any):
    return jsonify({"success": True, "message": message, **data}), code


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def error_response(exc: DomainError):
    for exc_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, exc_type):
            return fail(str(exc), status)
    return fail(str(exc), 400)


def json_endpoint(view):
    """Turn domain errors into JSON failures; anything else is logged and reported generically."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return fail("Unexpected server error", 500)

    return wrapper


def current_role() -> Optional[Role]:
    value = session.get("role")
    return Role(value) if value else None


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "role" not in session:
            return fail("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "role" not in session:
            return fail("Please log in to continue", 401)
        if session.get("role") != Role.ADMIN.value:
            return fail("Administrator access required", 403)
        return view(*args, **kwargs)

    return wrapper


def _as_class_number(value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid class number: {value!r}")
    if number <= 0:
        raise ValidationError(f"Invalid class number: {value!r}")
    return number


def scoped_class(requested: Any = None) -> int:
    """Class the caller may act on: leaders are pinned to their own class, the admin must name one."""
    if current_role() == Role.ADMIN:
        if requested in (None, ""):
            raise ValidationError("Class number is required")
        return _as_class_number(requested)

    own = session.get("class_number")
    if own is None:
        raise AuthenticationError("Please log in to continue")
    if requested not in (None, "") and _as_class_number(requested) != int(own):
        raise AuthorizationError("You can only access your own class")
    return int(own)


def payload() -> dict:
    """JSON body, falling back to form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()
