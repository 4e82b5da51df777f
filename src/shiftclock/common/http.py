from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional, TypeVar

from flask import Flask, jsonify, request

from ..core.exceptions import ClockInRejected, DomainError, NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def parse_enum(enum_cls: type[E], value: Optional[str], default: E) -> E:
    if value in (None, ""):
        return default
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {enum_cls.__name__} {value!r} (expected one of: {allowed})")


def optional_int(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid number: {value!r}")


def int_list(value, name: str) -> list[int]:
    if value in (None, ""):
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{name} must be a list of numbers")
    return [optional_int(v) for v in value if v not in (None, "")]


def register_error_handlers(app: Flask) -> None:
    """Map domain errors to JSON responses in the ``{"success": false, ...}`` shape."""

    @app.errorhandler(ClockInRejected)
    def _clock_in_rejected(e: ClockInRejected):
        return jsonify({"success": False, "message": str(e), "reason": e.failure.value}), 400

    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return jsonify({"success": False, "message": str(e)}), 404

    @app.errorhandler(PersistenceError)
    def _persistence(e: PersistenceError):
        logger.error("Persistence failure on %s %s: %s", request.method, request.path, e)
        return jsonify({"success": False, "message": "Storage unavailable, please retry", "retryable": True}), 503

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return jsonify({"success": False, "message": str(e)}), 400
