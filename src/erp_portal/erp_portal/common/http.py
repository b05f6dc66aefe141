"""JSON response helpers shared by every controller."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from functools import wraps
from typing import Any

from flask import jsonify, request
from flask.json.provider import DefaultJSONProvider

from ..core.exceptions import DomainError, ValidationError
from .pagination import Page

logger = logging.getLogger(__name__)


class ApiJSONProvider(DefaultJSONProvider):
    """ISO dates, HH:MM:SS times and plain numbers for DECIMAL columns."""

    @staticmethod
    def default(o: Any):
        if isinstance(o, datetime):
            return o.isoformat(sep=" ")
        if isinstance(o, date):
            return o.isoformat()
        if isinstance(o, time):
            return o.strftime("%H:%M:%S")
        if isinstance(o, timedelta):
            total = int(o.total_seconds())
            return f"{total // 3600:02d}:{(total % 3600) // 60:02d}:{total % 60:02d}"
        if isinstance(o, Decimal):
            return float(o)
        if isinstance(o, (set, frozenset)):
            return sorted(o)
        return DefaultJSONProvider.default(o)


def ok(status: int = 200, **payload: Any):
    body = {"success": True}
    body.update(payload)
    return jsonify(body), status


def fail(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def paged(page: Page, **extra: Any):
    return ok(data=list(page.items), pagination=page.meta(), **extra)


def json_body() -> dict:
    """Request JSON as a dict.

    `navigator.sendBeacon` posts JSON as text/plain, so fall back to parsing
    the raw body.
    """

    data = request.get_json(silent=True)
    if data is None:
        raw = request.get_data(as_text=True)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            raise ValidationError("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def api_route(view):
    """Map domain errors to `{success: false, error}` responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return fail(str(e), e.status_code)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return fail("Internal server error", 500)

    return wrapper
