from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from functools import wraps

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..attendance.model import Provenance
from ..core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (AlreadyCheckedInError, 409),
    (AlreadyCheckedOutError, 409),
    (InvalidStateError, 409),
    (ConflictError, 409),
)


def to_json(value):
    """Dataclasses, enums and datetimes into JSON-ready values (ISO-8601 timestamps)."""
    if is_dataclass(value) and not isinstance(value, type):
        data = {f.name: to_json(getattr(value, f.name)) for f in fields(value)}
        for name in ("is_open", "state", "total_pages"):
            if hasattr(type(value), name):
                data[name] = to_json(getattr(value, name))
        return data
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(v) for v in value]
    return value


def current_user_id() -> str:
    user_id = session.get("user_id")
    if user_id is None or str(user_id).strip() == "":
        raise AuthenticationError("Unauthorized")
    return str(user_id)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_user_id()
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _optional_float(value, field_name: str):
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def provenance_from_request(data: dict) -> Provenance:
    """Client IP and user agent from the request, location fields from the body."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    ip_address = forwarded.split(",")[0].strip() if forwarded else request.remote_addr
    return Provenance(
        location_name=data.get("location_name") or data.get("locationName") or None,
        ip_address=ip_address or None,
        device_info=request.headers.get("User-Agent") or None,
        latitude=_optional_float(data.get("latitude"), "Latitude"),
        longitude=_optional_float(data.get("longitude"), "Longitude"),
    )


def error_response(err: DomainError):
    status = 500
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(err, error_type):
            status = code
            break

    body = {"error": err.code, "message": str(err)}
    record = getattr(err, "record", None)
    if record is not None:
        body["record"] = to_json(record)
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(err: DomainError):
        if isinstance(err, ConflictError):
            logger.warning("Conflict on %s %s: %s", request.method, request.path, err)
        return error_response(err)

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException):
        return jsonify({"error": err.name.lower().replace(" ", "_"), "message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "internal_error", "message": "Internal server error"}), 500
